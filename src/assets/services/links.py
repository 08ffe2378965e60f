"""Link services: typed relations between assets."""

import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction as db_transaction

from ..models import Asset, AssetLink
from .permissions import can_modify_asset
from .transactions import record_link

logger = logging.getLogger(__name__)

LINK_TYPES = dict(AssetLink.LINK_TYPE_CHOICES)


def _resolve(asset: Asset, user, link_type, target):
    if not can_modify_asset(user, asset):
        raise PermissionDenied("Permission denied")
    if link_type not in LINK_TYPES:
        raise ValidationError(f"Invalid link type '{link_type}'.")
    target_obj = Asset.objects.lookup(target)
    if target_obj is None:
        raise ValidationError(f"Couldn't resolve '{target}' into an asset.")
    return target_obj


def add_link(asset: Asset, user, link_type: str, target) -> AssetLink:
    """Link ``asset`` to another asset, given as instance, id or name."""
    target_obj = _resolve(asset, user, link_type, target)
    if target_obj.pk == asset.pk:
        raise ValidationError("Can't link an asset to itself.")
    if asset.links.filter(target=target_obj, link_type=link_type).exists():
        raise ValidationError("That link already exists.")

    with db_transaction.atomic():
        link = AssetLink.objects.create(
            base=asset,
            target=target_obj,
            link_type=link_type,
            created_by=user,
        )
        record_link(asset, user, link_type, added=target_obj)
    logger.info(
        "Asset #%s %s asset #%s (added by %s)",
        asset.pk,
        LINK_TYPES[link_type].lower(),
        target_obj.pk,
        user,
    )
    return link


def delete_link(asset: Asset, user, link_type: str, target) -> None:
    """Remove a link from ``asset`` to another asset."""
    target_obj = _resolve(asset, user, link_type, target)
    link = asset.links.filter(target=target_obj, link_type=link_type).first()
    if link is None:
        raise ValidationError("That link does not exist.")

    with db_transaction.atomic():
        link.delete()
        record_link(asset, user, link_type, removed=target_obj)
    logger.info(
        "Asset #%s no longer %s asset #%s (removed by %s)",
        asset.pk,
        LINK_TYPES[link_type].lower(),
        target_obj.pk,
        user,
    )
