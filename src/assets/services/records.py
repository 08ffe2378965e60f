"""Asset creation and update services.

All status changes pass through the lifecycle gate. Assets are never
deleted; they move to a terminal status instead.
"""

import logging
from dataclasses import dataclass, field

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction as db_transaction

from ..lifecycles import get_gate
from ..models import Asset, AssetRole, Catalog, is_valid_name
from .custom_fields import attach_value
from .permissions import (
    can_create_asset,
    can_modify_asset,
    can_reopen_asset,
    can_see_asset,
)
from .roles import add_roles_on_create
from .transactions import record_create, record_set, record_status

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "description")


def reopen_denied_message(status):
    return (
        f"Permission denied: reopening an asset from '{status}' "
        f"requires the right to create assets."
    )


@dataclass
class CreateResult:
    """Outcome of a successful creation.

    ``errors`` lists problems that did not prevent creation, such as a
    role member that could not be found.
    """

    asset: Asset
    message: str
    errors: list[str] = field(default_factory=list)


def load_catalog(identifier):
    """Return a catalog given an instance, id or name."""
    return Catalog.objects.lookup(identifier)


def validate_catalog(identifier):
    """Return the catalog if it exists and is enabled, otherwise None."""
    catalog = load_catalog(identifier)
    if catalog is None or catalog.disabled:
        return None
    return catalog


def load_asset(identifier, user=None):
    """Load an asset by numeric id or by name.

    Returns None when nothing matches, or when ``user`` is given and
    cannot see the asset.
    """
    asset = Asset.objects.lookup(identifier)
    if asset is None:
        return None
    if user is not None and not can_see_asset(user, asset):
        return None
    return asset


def create_asset(
    user,
    catalog,
    name="",
    description="",
    status=None,
    owner=None,
    held_by=None,
    contact=None,
    custom_fields=None,
) -> CreateResult:
    """Create an asset with its roles and custom field values.

    ``catalog`` may be a Catalog, an id or a name. ``owner``, ``held_by``
    and ``contact`` take a principal or a list of principals (see
    ``resolve_principal``). ``custom_fields`` maps a custom field id or
    name to a value or list of values.

    Raises ValidationError or PermissionDenied without persisting
    anything.
    """
    catalog_obj = validate_catalog(catalog)
    if catalog_obj is None:
        raise ValidationError("Invalid catalog")
    if not can_create_asset(user, catalog_obj):
        raise PermissionDenied("Permission denied")
    name = name or ""
    if not is_valid_name(name):
        raise ValidationError("Invalid name (names may not be all digits)")

    status = get_gate().check_create(catalog_obj.lifecycle, status)

    try:
        with db_transaction.atomic():
            asset = Asset(
                name=name,
                description=description or "",
                catalog=catalog_obj,
                status=status,
                created_by=user,
                updated_by=user,
            )
            asset.full_clean()
            asset.save()

            errors = add_roles_on_create(
                asset,
                user,
                {
                    AssetRole.OWNER: owner,
                    AssetRole.HELD_BY: held_by,
                    AssetRole.CONTACT: contact,
                },
            )

            for key, values in (custom_fields or {}).items():
                if not isinstance(values, (list, tuple)):
                    values = [values]
                for value in values:
                    if value is None:
                        continue
                    try:
                        attach_value(
                            asset, user, key, value, record_transaction=False
                        )
                    except ValidationError as e:
                        raise ValidationError(
                            f"Couldn't add custom field value on create: "
                            f"{e.messages[0]}"
                        ) from e

            record_create(asset, user)
    except ValidationError as e:
        logger.error(
            "Asset creation in catalog '%s' rolled back: %s",
            catalog_obj,
            "; ".join(e.messages),
        )
        raise

    logger.info(
        "Asset #%s created in catalog '%s' by %s",
        asset.pk,
        catalog_obj,
        user,
    )
    return CreateResult(
        asset=asset,
        message=f"Asset #{asset.pk} created: {name}",
        errors=errors,
    )


def _check_modify(asset: Asset, user):
    if not can_modify_asset(user, asset):
        raise PermissionDenied("Permission denied")


def _refresh_from(asset: Asset, locked: Asset, fields):
    for name in fields:
        setattr(asset, name, getattr(locked, name))


def update_asset(asset: Asset, user, field_name: str, value):
    """Change a core field and record the change.

    Status and catalog changes are routed to ``set_status`` and
    ``set_catalog``. Returns the Transaction describing the change.
    """
    if field_name == "status":
        return set_status(asset, user, value)
    if field_name == "catalog":
        return set_catalog(asset, user, value)
    if field_name not in EDITABLE_FIELDS:
        raise ValidationError(f"Field '{field_name}' can't be changed.")
    _check_modify(asset, user)

    value = value or ""
    model_field = Asset._meta.get_field(field_name)
    value = model_field.clean(value, asset)

    with db_transaction.atomic():
        locked = Asset.objects.select_for_update().get(pk=asset.pk)
        old_value = getattr(locked, field_name)
        if old_value == value:
            raise ValidationError("That is already the current value")
        setattr(locked, field_name, value)
        locked.updated_by = user
        locked.save(update_fields=[field_name, "updated_by", "updated_at"])
        txn = record_set(locked, user, field_name, old_value, value)

    _refresh_from(asset, locked, [field_name, "updated_by", "updated_at"])
    return txn


def set_status(asset: Asset, user, status: str):
    """Move an asset to a new status through the lifecycle gate.

    Returns the Transaction describing the change. Raises InvalidStatus
    or IllegalTransition (both ValidationError) when the gate refuses,
    and PermissionDenied when a reopening needs the create right.
    """
    _check_modify(asset, user)
    gate = get_gate()

    try:
        with db_transaction.atomic():
            locked = (
                Asset.objects.select_for_update()
                .select_related("catalog")
                .get(pk=asset.pk)
            )
            old_status = locked.status
            if status == old_status:
                raise ValidationError("That is already the current value")
            gate.check_update(locked, status)
            lifecycle = gate.lifecycle(locked.lifecycle)
            if lifecycle.is_reopening(
                old_status, status
            ) and not can_reopen_asset(user, locked):
                raise PermissionDenied(reopen_denied_message(old_status))
            locked.status = status
            locked.updated_by = user
            locked.save(update_fields=["status", "updated_by", "updated_at"])
            txn = record_status(locked, user, old_status, status)
    except (ValidationError, PermissionDenied) as e:
        logger.warning(
            "Rejected status change on asset #%s to '%s': %s",
            asset.pk,
            status,
            "; ".join(getattr(e, "messages", [str(e)])),
        )
        raise

    _refresh_from(asset, locked, ["status", "updated_by", "updated_at"])
    return txn


def set_catalog(asset: Asset, user, catalog):
    """Move an asset to another catalog.

    When the target catalog uses a different lifecycle the status is
    translated through the source lifecycle's ``maps`` table; a status
    that is valid in both lifecycles is kept as is. Returns the
    Transaction for the catalog change.
    """
    _check_modify(asset, user)
    target = validate_catalog(catalog)
    if target is None:
        raise ValidationError("Invalid catalog")
    if not can_create_asset(user, target):
        raise PermissionDenied("Permission denied")

    gate = get_gate()
    with db_transaction.atomic():
        locked = (
            Asset.objects.select_for_update()
            .select_related("catalog")
            .get(pk=asset.pk)
        )
        if locked.catalog_id == target.pk:
            raise ValidationError("That is already the current value")
        source = gate.lifecycle(locked.catalog.lifecycle)
        dest = gate.lifecycle(target.lifecycle)
        old_catalog = locked.catalog
        old_status = locked.status
        new_status = old_status
        if source.name != dest.name:
            new_status = source.map_status(dest.name, old_status)
            if new_status is None:
                if not dest.is_valid(old_status):
                    raise ValidationError(
                        f"Mapping between lifecycle '{source.name}' and "
                        f"'{dest.name}' is missing status '{old_status}'. "
                        f"Contact your system administrator."
                    )
                new_status = old_status

        locked.catalog = target
        locked.status = new_status
        locked.updated_by = user
        locked.save(
            update_fields=["catalog", "status", "updated_by", "updated_at"]
        )
        txn = record_set(locked, user, "catalog", old_catalog, target)
        if new_status != old_status:
            record_status(locked, user, old_status, new_status)

    _refresh_from(
        asset, locked, ["catalog", "status", "updated_by", "updated_at"]
    )
    return txn


def delete_asset(asset: Asset):
    """Assets may not be deleted; always raises.

    Use ``set_status(asset, user, "deleted")`` instead.
    """
    raise ValidationError("Assets may not be deleted")
