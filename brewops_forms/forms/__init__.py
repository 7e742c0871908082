"""Form controllers and the BrewOps form catalogue."""

from brewops_forms.forms.controller import (
    FieldSpec,
    FormController,
    FormDefinition,
    UnknownFieldError,
)
from brewops_forms.forms.definitions import (
    FORMS,
    FormNotFoundError,
    add_production_form,
    add_supplier_form,
    change_password_form,
    edit_inventory_form,
    edit_supplier_form,
    forgot_password_form,
    get_form,
    order_status_form,
    profile_form,
    reset_password_form,
)
from brewops_forms.forms.gate import SubmissionGate, SubmissionMessages

__all__ = [
    # Controller
    "FieldSpec",
    "FormController",
    "FormDefinition",
    "SubmissionGate",
    "SubmissionMessages",
    "UnknownFieldError",
    # Catalogue
    "FORMS",
    "FormNotFoundError",
    "add_production_form",
    "add_supplier_form",
    "change_password_form",
    "edit_inventory_form",
    "edit_supplier_form",
    "forgot_password_form",
    "get_form",
    "order_status_form",
    "profile_form",
    "reset_password_form",
]
