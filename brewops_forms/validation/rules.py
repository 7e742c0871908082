"""Validation rules for form fields.

A rule takes the current field value and returns an error message, or
None when the value is acceptable. Cross-field rules additionally take
the whole form state and are declared with ``depends_on`` on the field.
"""

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

Rule = Callable[[Any], str | None]
FormRule = Callable[[Any, Mapping[str, Any]], str | None]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-\(\)]+$")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def is_blank(value: Any) -> bool:
    """Whether a value counts as not filled in."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def parse_int_prefix(value: Any) -> int | None:
    """Parse the leading integer of a value.

    Mirrors browser parseInt: "12kg" -> 12, "abc" -> None, 3.9 -> 3.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if value is None:
        return None
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else None


def parse_float_prefix(value: Any) -> float | None:
    """Parse the leading number of a value, like browser parseFloat."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return None
    match = _FLOAT_PREFIX.match(str(value))
    return float(match.group(1)) if match else None


def digits_only(value: Any) -> str:
    """Strip every non-digit character."""
    return re.sub(r"\D", "", str(value or ""))


def required(message: str) -> Rule:
    def rule(value: Any) -> str | None:
        return message if is_blank(value) else None

    return rule


def integer_in_range(label: str, minimum: int = 1, maximum: int = 999999) -> Rule:
    """Integer field constrained to a closed range.

    Empty, below-minimum and above-maximum values each get their own
    message. Non-numeric input is reported like a below-minimum value.

    Args:
        label: Field label used in messages (e.g. "Quantity").
        minimum: Smallest accepted value.
        maximum: Largest accepted value.

    Returns:
        The rule function.
    """
    low_message = (
        f"{label} must be a positive number"
        if minimum == 1
        else f"{label} must be at least {minimum}"
    )

    def rule(value: Any) -> str | None:
        if value is None or value == "":
            return f"{label} is required"
        number = parse_int_prefix(value)
        if number is None or number < minimum:
            return low_message
        if number > maximum:
            return f"{label} cannot exceed {maximum}"
        return None

    return rule


def positive_number(label: str) -> Rule:
    def rule(value: Any) -> str | None:
        if is_blank(value):
            return f"{label} is required"
        number = parse_float_prefix(value)
        if number is None or number <= 0:
            return f"{label} must be greater than 0"
        return None

    return rule


def email(
    required_message: str = "Email is required",
    invalid_message: str = "Please enter a valid email address",
) -> Rule:
    def rule(value: Any) -> str | None:
        if is_blank(value):
            return required_message
        if not EMAIL_PATTERN.match(str(value)):
            return invalid_message
        return None

    return rule


def length_between(
    label: str,
    minimum: int,
    maximum: int,
    optional: bool = False,
    strip: bool = False,
) -> Rule:
    """Text length constrained to [minimum, maximum] characters.

    Args:
        label: Field label used in messages.
        minimum: Minimum length.
        maximum: Maximum length.
        optional: If True, an empty value is accepted.
        strip: Measure length after stripping surrounding whitespace.
    """

    def rule(value: Any) -> str | None:
        if is_blank(value):
            return None if optional else f"{label} is required"
        text = str(value).strip() if strip else str(value)
        if not minimum <= len(text) <= maximum:
            return f"{label} must be between {minimum} and {maximum} characters"
        return None

    return rule


def min_length(message: str, minimum: int) -> Rule:
    def rule(value: Any) -> str | None:
        if value is None or len(str(value)) < minimum:
            return message
        return None

    return rule


def phone_digits(count: int = 10, optional: bool = True) -> Rule:
    """Phone number that must normalize to exactly ``count`` digits."""

    def rule(value: Any) -> str | None:
        if is_blank(value):
            return None if optional else "Phone number is required"
        if len(digits_only(value)) != count:
            return f"Phone number must contain exactly {count} digits"
        return None

    return rule


def phone_pattern(message: str = "Please enter a valid phone number") -> Rule:
    """Loose phone check: optional leading +, digits, spaces, dashes, parentheses."""

    def rule(value: Any) -> str | None:
        if is_blank(value):
            return None
        return None if PHONE_PATTERN.match(str(value)) else message

    return rule


def unique_phone(
    existing: Iterable[str | None],
    message: str = "Phone number already exists for another supplier",
) -> Rule:
    """Reject phone numbers already used by a loaded record.

    Numbers are compared on their digits only.
    """
    taken = {digits_only(phone) for phone in existing if phone}
    taken.discard("")

    def rule(value: Any) -> str | None:
        if is_blank(value):
            return None
        return message if digits_only(value) in taken else None

    return rule


def otp_code(digits: int = 6) -> Rule:
    pattern = re.compile(rf"^\d{{{digits}}}$")

    def rule(value: Any) -> str | None:
        text = str(value or "").strip()
        if not pattern.match(text):
            return f"Enter the {digits}-digit OTP"
        return None

    return rule


def one_of(choices: Iterable[str], message: str) -> Rule:
    allowed = frozenset(choices)

    def rule(value: Any) -> str | None:
        return None if value in allowed else message

    return rule


def chain(*rules: Rule) -> Rule:
    """Combine rules; the first error wins."""

    def rule(value: Any) -> str | None:
        for r in rules:
            error = r(value)
            if error:
                return error
        return None

    return rule


def matches(other_field: str, message: str) -> FormRule:
    """Cross-field rule: value must equal another field's value."""

    def rule(value: Any, values: Mapping[str, Any]) -> str | None:
        return None if value == values.get(other_field) else message

    return rule


def required_with(other_field: str, message: str) -> FormRule:
    """Cross-field rule: value is required when another field is filled in."""

    def rule(value: Any, values: Mapping[str, Any]) -> str | None:
        if not is_blank(values.get(other_field)) and is_blank(value):
            return message
        return None

    return rule
