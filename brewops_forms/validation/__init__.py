"""Field validation for brewops-forms."""

from brewops_forms.validation.rules import FormRule, Rule
from brewops_forms.validation.validator import DEFAULT_DEBOUNCE_SECONDS, FieldValidator

__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "FieldValidator",
    "FormRule",
    "Rule",
]
