"""Change record creation service.

Callers run these inside the same atomic block as the change they
document, so the record and the change persist together or not at all.
"""

from ..models import Asset, Transaction


def _text(value) -> str:
    if value is None:
        return ""
    return str(value)[:255]


def record_create(asset: Asset, performed_by) -> Transaction:
    """Record the creation of an asset."""
    return Transaction.objects.create(
        asset=asset,
        action="create",
        new_value=_text(asset.name),
        created_by=performed_by,
    )


def record_set(
    asset: Asset, performed_by, field: str, old_value, new_value
) -> Transaction:
    """Record a change to a core field such as name or catalog."""
    return Transaction.objects.create(
        asset=asset,
        action="set",
        field=field,
        old_value=_text(old_value),
        new_value=_text(new_value),
        created_by=performed_by,
    )


def record_status(
    asset: Asset, performed_by, old_status: str, new_status: str
) -> Transaction:
    return Transaction.objects.create(
        asset=asset,
        action="status",
        field="status",
        old_value=_text(old_status),
        new_value=_text(new_status),
        created_by=performed_by,
    )


def record_role_change(
    asset: Asset,
    performed_by,
    role: str,
    added=None,
    removed=None,
) -> Transaction:
    """Record a principal being added to or removed from a role.

    When both are given the role was single-valued and ``added``
    replaced ``removed``.
    """
    return Transaction.objects.create(
        asset=asset,
        action=(
            "add_role_member" if added is not None else "delete_role_member"
        ),
        field=role,
        old_value=_text(removed),
        new_value=_text(added),
        created_by=performed_by,
    )


def record_custom_field(
    asset: Asset, performed_by, field_name: str, old_value, new_value
) -> Transaction:
    return Transaction.objects.create(
        asset=asset,
        action="custom_field",
        field=field_name[:64],
        old_value=_text(old_value),
        new_value=_text(new_value),
        created_by=performed_by,
    )


def record_link(
    asset: Asset, performed_by, link_type: str, added=None, removed=None
) -> Transaction:
    """Record a link from ``asset`` being added or removed."""
    return Transaction.objects.create(
        asset=asset,
        action="add_link" if added is not None else "delete_link",
        field=link_type,
        old_value=_text(removed),
        new_value=_text(added),
        created_by=performed_by,
    )
