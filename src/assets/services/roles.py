"""Role membership services for assets."""

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction as db_transaction
from django.db.models import Q

from ..models import Asset, AssetRole
from .permissions import can_modify_asset
from .transactions import record_role_change

User = get_user_model()

ROLE_LABELS = dict(AssetRole.ROLE_CHOICES)

GROUP_PREFIX = "group:"


def resolve_principal(value):
    """Resolve a user or group reference.

    Accepts a User or Group instance, a user id, a username, an email
    address, or ``"group:<id>"`` for groups. Returns None when nothing
    matches.
    """
    if isinstance(value, (User, Group)):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return User.objects.filter(pk=value).first()
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value:
        return None
    if value.startswith(GROUP_PREFIX):
        ref = value[len(GROUP_PREFIX):]
        if not ref.isdigit():
            return None
        return Group.objects.filter(pk=int(ref)).first()
    if value.isdigit():
        return User.objects.filter(pk=int(value)).first()
    return User.objects.filter(
        Q(username=value) | Q(email__iexact=value)
    ).first()


def _principal_filter(principal):
    if isinstance(principal, Group):
        return {"group": principal}
    return {"user": principal}


def _check_role(role):
    if role not in ROLE_LABELS:
        raise ValidationError(f"Invalid role '{role}'.")


def _check_modify(asset: Asset, user):
    if not can_modify_asset(user, asset):
        raise PermissionDenied("No permission to modify this asset")


def add_member(
    asset: Asset, role: str, principal, performed_by, record=True
) -> AssetRole:
    """Add a principal to a role without checking rights.

    Single-valued roles accept users only and replace the current holder.
    """
    _check_role(role)
    resolved = resolve_principal(principal)
    if resolved is None:
        raise ValidationError(
            f"Couldn't load principal '{principal}' for role "
            f"{ROLE_LABELS[role]}."
        )
    single = role in AssetRole.SINGLE_ROLES
    if single and isinstance(resolved, Group):
        raise ValidationError(
            f"Only users can hold the {ROLE_LABELS[role]} role."
        )
    membership = _principal_filter(resolved)
    if asset.roles.filter(role=role, **membership).exists():
        raise ValidationError(
            f"{resolved} is already a member of {ROLE_LABELS[role]}."
        )

    with db_transaction.atomic():
        replaced = None
        if single:
            current = asset.roles.filter(role=role).first()
            if current:
                replaced = current.principal
                current.delete()
        member = AssetRole.objects.create(asset=asset, role=role, **membership)
        if record:
            record_role_change(
                asset, performed_by, role, added=resolved, removed=replaced
            )
    return member


def add_role_member(asset: Asset, user, role: str, principal) -> AssetRole:
    """Add a principal to one of the asset's roles."""
    _check_modify(asset, user)
    return add_member(asset, role, principal, user)


def delete_role_member(asset: Asset, user, role: str, principal) -> None:
    """Remove a principal from one of the asset's roles."""
    _check_modify(asset, user)
    _check_role(role)
    resolved = resolve_principal(principal)
    if resolved is None:
        raise ValidationError(f"Couldn't load principal '{principal}'.")
    member = asset.roles.filter(
        role=role, **_principal_filter(resolved)
    ).first()
    if member is None:
        raise ValidationError(
            f"{resolved} is not a member of {ROLE_LABELS[role]}."
        )
    with db_transaction.atomic():
        member.delete()
        record_role_change(asset, user, role, removed=resolved)


def add_roles_on_create(asset: Asset, performed_by, roles: dict) -> list[str]:
    """Add the role members requested at creation time.

    ``roles`` maps a role name to a principal or a list of principals.
    Failures do not stop creation; they are returned as messages.
    """
    errors = []
    for role, value in roles.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        values = [v for v in values if v is not None and v != ""]
        if role in AssetRole.SINGLE_ROLES and len(values) > 1:
            for extra in values[1:]:
                errors.append(
                    f"Only one principal may hold the {ROLE_LABELS[role]} "
                    f"role; ignoring '{extra}'."
                )
            values = values[:1]
        for principal in values:
            try:
                add_member(asset, role, principal, performed_by, record=False)
            except ValidationError as e:
                errors.extend(e.messages)
    return errors
