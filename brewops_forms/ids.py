"""Client-side identifiers and generated secrets."""

import random
import secrets
import string
from collections.abc import Iterable
from datetime import datetime

from brewops_forms.validation.rules import parse_int_prefix

PASSWORD_ALPHABET = string.ascii_letters + string.digits
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def production_id(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """Pre-generate a production record id.

    Format is ``PROD-YYYYMMDD-HHMM-XXXXX`` with a random uppercase
    alphanumeric suffix.

    Args:
        now: Timestamp to embed, defaults to the current local time.
        rng: Random source for the suffix, for reproducible ids in tests.
    """
    now = now if now is not None else datetime.now()
    rng = rng if rng is not None else random.Random()
    suffix = "".join(rng.choice(_SUFFIX_ALPHABET) for _ in range(5))
    return f"PROD-{now:%Y%m%d}-{now:%H%M}-{suffix}"


def next_supplier_id(existing: Iterable[str | None]) -> str:
    """Next ``SUPnnnn`` id after the highest one already in use."""
    highest = 0
    for supplier_id in existing:
        if not isinstance(supplier_id, str) or not supplier_id.startswith("SUP"):
            continue
        number = parse_int_prefix(supplier_id[3:])
        if number is not None:
            highest = max(highest, number)
    return f"SUP{highest + 1:04d}"


def generate_password(length: int = 12) -> str:
    """Random alphanumeric password for a new supplier account."""
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
