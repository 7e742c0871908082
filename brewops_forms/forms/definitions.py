"""Concrete BrewOps forms.

Each factory returns a fresh FormDefinition. Factories take whatever
context the form needs at open time (a generated production id, the
suppliers already loaded, the stored user info).
"""

import random
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from typing import Any

from brewops_forms.api.credentials import SessionFileCredentials
from brewops_forms.api.envelope import ApiEnvelope
from brewops_forms.forms.controller import FieldSpec, FormDefinition
from brewops_forms.forms.gate import SubmissionMessages
from brewops_forms.ids import generate_password, next_supplier_id, production_id
from brewops_forms.validation import rules

MANAGER_DASHBOARD = "/production-manager-dashboard"
SUPPLIER_DASHBOARD = "/supplier-dashboard"
LOGIN_PAGE = "/login"

ORDER_STATUSES = ("pending", "delivered")


def _blank_to_none(value: Any) -> Any:
    return None if rules.is_blank(value) else value


def _account_number(value: Any) -> str | None:
    if rules.is_blank(value):
        return None
    if not 4 <= len(str(value)) <= 34:
        return "Account number length is invalid"
    return None


def _confirmation(required_message: str, mismatch_message: str, other: str) -> rules.FormRule:
    match = rules.matches(other, mismatch_message)

    def rule(value: Any, values: Mapping[str, Any]) -> str | None:
        if rules.is_blank(value):
            return required_message
        return match(value, values)

    return rule


# Inventory


def edit_inventory_form() -> FormDefinition:
    """Edit the quantity of an inventory record; the inventory id is fixed."""

    def payload(values: dict[str, Any]) -> dict[str, Any]:
        quantity = rules.parse_int_prefix(values["quantity"])
        return {
            "inventoryid": values["inventory_id"],
            "quantity": quantity,
            "quantity_kg": quantity,
        }

    return FormDefinition(
        name="edit-inventory",
        title="Edit Inventory",
        method="PUT",
        path="/api/manager/inventory/{id}",
        load_path="/api/manager/inventory/{id}",
        load_fields=lambda data: {
            "inventory_id": data.get("inventoryid") or "",
            "quantity": "" if data.get("quantity") is None else data["quantity"],
        },
        load_failure_message="Failed to fetch inventory.",
        fields=[
            FieldSpec(name="inventory_id", label="Inventory Number", read_only=True),
            FieldSpec(
                name="quantity",
                label="Quantity (kg)",
                rule=rules.integer_in_range("Quantity", 1, 999999),
            ),
        ],
        build_payload=payload,
        messages=SubmissionMessages(
            success="Inventory updated successfully",
            failure="Failed to update inventory.",
        ),
        redirect=MANAGER_DASHBOARD,
        reload=True,
    )


# Production


def _production_success(data: Any) -> str:
    data = data if isinstance(data, dict) else {}
    text = (
        f"Production added! ID: {data.get('production_id') or 'N/A'}, "
        f"Quantity: {data.get('quantity') or 0} kg"
    )
    if data.get("remainingInventory") is not None:
        text += (
            f" | Inventory deducted: {data.get('inventoryDeducted')} kg"
            f" | Remaining: {data['remainingInventory']} kg"
        )
    return text


def add_production_form(
    now: datetime | None = None,
    rng: random.Random | None = None,
    today: Callable[[], date] = date.today,
) -> FormDefinition:
    """Record a production run against raw-material inventory.

    The production id is generated when the form opens and sent with the
    quantity and today's date.
    """
    generated = production_id(now, rng)

    def payload(values: dict[str, Any]) -> dict[str, Any]:
        return {
            "quantity": rules.parse_float_prefix(values["quantity"]),
            "production_id": values["production_id"],
            "production_date": today().isoformat(),
        }

    return FormDefinition(
        name="add-production",
        title="Add Production",
        method="POST",
        path="/api/manager/production",
        fields=[
            FieldSpec(
                name="production_id",
                label="Production ID",
                initial=generated,
                read_only=True,
            ),
            FieldSpec(
                name="quantity",
                label="Quantity (kg)",
                rule=rules.positive_number("Quantity"),
            ),
        ],
        build_payload=payload,
        messages=SubmissionMessages(
            success=_production_success,
            failure="Failed to add production: Unknown error",
            server_prefix="Failed to add production: ",
            network="Network error: Unable to add production record. Please check your connection.",
        ),
    )


# Suppliers


def _supplier_fields(
    password_optional: bool, existing_phones: Iterable[str | None]
) -> list[FieldSpec]:
    phone_rule = rules.chain(rules.phone_digits(10), rules.unique_phone(existing_phones))
    return [
        FieldSpec(
            name="name",
            label="Name",
            rule=rules.length_between("Name", 2, 100, strip=True),
        ),
        FieldSpec(name="email", label="Email", rule=rules.email()),
        FieldSpec(
            name="password",
            label="Password",
            rule=rules.length_between("Password", 6, 128, optional=password_optional),
            initial="" if password_optional else generate_password(),
            sensitive=True,
        ),
        FieldSpec(name="phone", label="Phone", rule=phone_rule),
        FieldSpec(name="address", label="Address"),
        FieldSpec(name="bank_name", label="Bank Name"),
        FieldSpec(name="account_number", label="Account Number", rule=_account_number),
        FieldSpec(
            name="account_holder_name",
            label="Account Holder Name",
            rule=rules.required_with(
                "account_number",
                "Account holder name is required when account number is provided",
            ),
            depends_on=("account_number",),
        ),
        FieldSpec(name="bank_branch", label="Bank Branch"),
        FieldSpec(name="bank_code", label="Bank Code"),
    ]


_BANK_FIELDS = (
    "address",
    "bank_name",
    "account_number",
    "account_holder_name",
    "bank_branch",
    "bank_code",
)


def _supplier_added(data: Any) -> str:
    data = data if isinstance(data, dict) else {}
    name = data.get("name") or "Supplier"
    suffix = f" ({data['supplier_id']})" if data.get("supplier_id") else ""
    return f"{name} added successfully{suffix}!"


def add_supplier_form(existing_suppliers: Iterable[Mapping[str, Any]] = ()) -> FormDefinition:
    """Register a new supplier account.

    Args:
        existing_suppliers: Suppliers already loaded, used to reject a
                            phone number that is taken.
    """
    existing_suppliers = list(existing_suppliers)
    phones = [supplier.get("phone") for supplier in existing_suppliers]
    # Shown for reference only; the backend assigns the real id
    preview_id = next_supplier_id(supplier.get("supplier_id") for supplier in existing_suppliers)

    def payload(values: dict[str, Any]) -> dict[str, Any]:
        phone = rules.digits_only(values["phone"])
        body = {
            "name": values["name"],
            "email": values["email"],
            "password": values["password"],
            "phone": phone or None,
        }
        for key in _BANK_FIELDS:
            body[key] = _blank_to_none(values[key])
        body["role"] = "supplier"
        return body

    return FormDefinition(
        name="add-supplier",
        title="Add Supplier",
        method="POST",
        path="/api/staff/suppliers",
        fields=[
            FieldSpec(name="supplier_id", label="Supplier ID", initial=preview_id, read_only=True),
            *_supplier_fields(password_optional=False, existing_phones=phones),
        ],
        build_payload=payload,
        messages=SubmissionMessages(
            success=_supplier_added,
            failure="Failed to add supplier",
            network="Error adding supplier",
        ),
    )


def edit_supplier_form() -> FormDefinition:
    """Edit an active supplier. The supplier id itself cannot change."""

    def payload(values: dict[str, Any]) -> dict[str, Any]:
        phone = values["phone"]
        body = {
            "name": values["name"],
            "email": values["email"],
            "phone": rules.digits_only(phone) if not rules.is_blank(phone) else phone,
        }
        for key in _BANK_FIELDS:
            body[key] = values[key]
        if values["password"]:
            body["password"] = values["password"]
        return body

    def load(data: dict[str, Any]) -> dict[str, Any]:
        fields = ("name", "email", "phone", *_BANK_FIELDS)
        return {key: data.get(key) or "" for key in fields}

    return FormDefinition(
        name="edit-supplier",
        title="Edit Supplier",
        method="PUT",
        path="/api/staff/suppliers/{id}",
        load_path="/api/staff/suppliers/{id}",
        load_fields=load,
        load_failure_message="Failed to fetch supplier",
        fields=_supplier_fields(password_optional=True, existing_phones=()),
        build_payload=payload,
        messages=SubmissionMessages(
            success="Supplier updated successfully!",
            failure="Failed to update supplier",
            network="Error updating supplier",
        ),
    )


# Passwords and profile


def change_password_form(credentials: SessionFileCredentials | None = None) -> FormDefinition:
    """Replace a temporary password with a new one.

    The stored name and email are sent along so the profile endpoint's
    own validation passes; on success the stored must-change flag is cleared.
    """
    user = credentials.get_user_info() if credentials is not None else {}

    def payload(values: dict[str, Any]) -> dict[str, Any]:
        return {
            "currentPassword": values["current_password"],
            "newPassword": values["new_password"],
            "name": user.get("name", ""),
            "email": user.get("email", ""),
        }

    def on_success(envelope: ApiEnvelope, sent: dict[str, Any]) -> None:
        if credentials is not None:
            credentials.update_user_info(must_change_password=0)

    return FormDefinition(
        name="change-password",
        title="Change Password",
        method="PUT",
        path="/api/auth/profile",
        fields=[
            FieldSpec(
                name="current_password",
                label="Current password",
                rule=rules.required("Current password is required"),
                sensitive=True,
            ),
            FieldSpec(
                name="new_password",
                label="New password",
                rule=rules.min_length("New password must be at least 6 characters", 6),
                sensitive=True,
            ),
            FieldSpec(
                name="confirm_password",
                label="Confirm new password",
                rule=_confirmation(
                    "Please confirm your new password",
                    "New passwords do not match",
                    "new_password",
                ),
                sensitive=True,
                depends_on=("new_password",),
            ),
        ],
        build_payload=payload,
        on_success=on_success,
        messages=SubmissionMessages(
            success="Password changed successfully",
            failure="Failed to change password",
            network="Error changing password",
        ),
        redirect=SUPPLIER_DASHBOARD,
    )


def forgot_password_form() -> FormDefinition:
    """Ask the backend to email a one-time password."""
    return FormDefinition(
        name="forgot-password",
        title="Forgot Password",
        method="POST",
        path="/api/users/send-otp",
        fields=[FieldSpec(name="email", label="Email", rule=rules.email())],
        messages=SubmissionMessages(
            success="Password reset email sent!",
            failure="Failed to send reset email. Please try again.",
        ),
        # The email is reused by the reset step
        reset_on_success=False,
    )


def reset_password_form(email: str = "") -> FormDefinition:
    """Set a new password using the emailed one-time password."""

    def payload(values: dict[str, Any]) -> dict[str, Any]:
        return {
            "email": values["email"],
            "otp": str(values["otp"]).strip(),
            "newPassword": values["new_password"],
        }

    return FormDefinition(
        name="reset-password",
        title="Reset Password",
        method="POST",
        path="/api/users/reset-password",
        fields=[
            FieldSpec(name="email", label="Email", rule=rules.email(), initial=email),
            FieldSpec(name="otp", label="OTP", rule=rules.otp_code(6)),
            FieldSpec(
                name="new_password",
                label="New password",
                rule=rules.min_length("New password must be at least 6 characters", 6),
                sensitive=True,
            ),
            FieldSpec(
                name="confirm_new_password",
                label="Confirm new password",
                rule=rules.matches("new_password", "Passwords do not match"),
                sensitive=True,
                depends_on=("new_password",),
            ),
        ],
        build_payload=payload,
        messages=SubmissionMessages(
            success="Password has been reset. Please login.",
            failure="Failed to reset password",
        ),
        redirect=LOGIN_PAGE,
    )


def profile_form(credentials: SessionFileCredentials | None = None) -> FormDefinition:
    """Edit the logged-in user's name, email and phone."""

    def payload(values: dict[str, Any]) -> dict[str, Any]:
        return {"name": values["name"], "email": values["email"], "phone": values["phone"]}

    def load(data: dict[str, Any]) -> dict[str, Any]:
        return {key: data.get(key) or "" for key in ("name", "email", "phone", "role", "id")}

    def on_success(envelope: ApiEnvelope, sent: dict[str, Any]) -> None:
        if credentials is not None:
            credentials.update_user_info(name=sent["name"], email=sent["email"])

    return FormDefinition(
        name="profile",
        title="Edit Profile",
        method="PUT",
        path="/api/auth/profile",
        load_path="/api/auth/profile",
        load_fields=load,
        load_failure_message="Error loading profile",
        fields=[
            FieldSpec(name="name", label="Name", rule=rules.required("Name is required")),
            FieldSpec(name="email", label="Email", rule=rules.email()),
            FieldSpec(name="phone", label="Phone Number", rule=rules.phone_pattern()),
            FieldSpec(name="role", label="Role", read_only=True),
            FieldSpec(name="id", label="User ID", read_only=True),
        ],
        build_payload=payload,
        on_success=on_success,
        messages=SubmissionMessages(
            success="Profile updated successfully!",
            failure="Failed to update profile",
            network="Error updating profile",
        ),
        reset_on_success=False,
    )


# Orders


def order_status_form(status: str = "", notes: str = "") -> FormDefinition:
    """Update the status of a staff order."""
    return FormDefinition(
        name="order-status",
        title="Update Order Status",
        method="PUT",
        path="/api/staff/orders/{id}/status",
        fields=[
            FieldSpec(
                name="status",
                label="Status",
                rule=rules.one_of(ORDER_STATUSES, "Please select a valid status"),
                initial=status,
            ),
            FieldSpec(name="notes", label="Notes", initial=notes),
        ],
        messages=SubmissionMessages(
            success="Order status updated successfully",
            failure="Failed to update order status",
        ),
    )


FORMS: dict[str, Callable[..., FormDefinition]] = {
    "edit-inventory": edit_inventory_form,
    "add-production": add_production_form,
    "add-supplier": add_supplier_form,
    "edit-supplier": edit_supplier_form,
    "change-password": change_password_form,
    "forgot-password": forgot_password_form,
    "reset-password": reset_password_form,
    "profile": profile_form,
    "order-status": order_status_form,
}


class FormNotFoundError(Exception):
    """Raised when a form name is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown form: {name} (available: {', '.join(sorted(FORMS))})")


def get_form(name: str, **context: Any) -> FormDefinition:
    """Build a registered form by name.

    Args:
        name: Registered form name (e.g. "edit-inventory").
        context: Keyword arguments passed to the form's factory.

    Raises:
        FormNotFoundError: If no form has that name.
    """
    if name not in FORMS:
        raise FormNotFoundError(name)
    return FORMS[name](**context)
