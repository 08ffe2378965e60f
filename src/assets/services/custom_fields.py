"""Custom field value services."""

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction as db_transaction

from ..models import Asset, CustomField, CustomFieldValue
from .permissions import can_modify_asset
from .transactions import record_custom_field

MAX_VALUE_LENGTH = CustomFieldValue._meta.get_field("value").max_length


def load_custom_field(field):
    """Return a custom field given an instance, id or name."""
    return CustomField.objects.lookup(field)


def attach_value(
    asset: Asset, performed_by, field, value, record_transaction=True
) -> CustomFieldValue:
    """Store a value for a custom field without checking rights.

    Single-value fields replace their current value; multi-value fields
    append until ``max_values`` is reached (0 means unlimited).
    """
    cf = load_custom_field(field)
    if cf is None:
        raise ValidationError(f"Custom field '{field}' not found.")
    if cf.disabled:
        raise ValidationError(f"Custom field '{cf.name}' is disabled.")
    if not cf.applies_to(asset.catalog):
        raise ValidationError(
            f"Custom field '{cf.name}' does not apply to catalog "
            f"'{asset.catalog}'."
        )
    value = "" if value is None else str(value).strip()
    if not value:
        raise ValidationError(f"No value given for '{cf.name}'.")
    if len(value) > MAX_VALUE_LENGTH:
        raise ValidationError(
            f"Values for '{cf.name}' are limited to "
            f"{MAX_VALUE_LENGTH} characters."
        )

    existing = asset.custom_field_values.filter(field=cf)
    with db_transaction.atomic():
        old_value = ""
        if cf.max_values == 1:
            current = existing.first()
            if current is not None:
                if current.value == value:
                    raise ValidationError("That is already the current value")
                old_value = current.value
                existing.delete()
        else:
            if existing.filter(value=value).exists():
                raise ValidationError(
                    f"'{value}' is already a value of '{cf.name}'."
                )
            if cf.max_values and existing.count() >= cf.max_values:
                raise ValidationError(
                    f"'{cf.name}' accepts at most {cf.max_values} values."
                )
        cfv = CustomFieldValue.objects.create(
            asset=asset,
            field=cf,
            value=value,
            created_by=performed_by,
        )
        if record_transaction:
            record_custom_field(asset, performed_by, cf.name, old_value, value)
    return cfv


def add_custom_field_value(
    asset: Asset, user, field, value
) -> CustomFieldValue:
    """Add a custom field value to an asset and record the change."""
    if not can_modify_asset(user, asset):
        raise PermissionDenied("No permission to modify this asset")
    return attach_value(asset, user, field, value)
