"""Permission checks for asset operations.

Rights come from Django's permission framework, so they can be granted
per user or through groups (see the ``setup_groups`` command).
"""

from ..models import Asset, Catalog


def can_create_asset(user, catalog: Catalog) -> bool:
    """Check if the user can create assets in the given catalog."""
    if catalog.disabled:
        return False
    return user.has_perm("assets.add_asset")


def can_modify_asset(user, asset: Asset) -> bool:
    """Check if the user can change the given asset."""
    return user.has_perm("assets.change_asset")


def can_see_asset(user, asset: Asset) -> bool:
    """Check if the user can view the given asset."""
    return user.has_perm("assets.view_asset") or can_modify_asset(
        user, asset
    )


def can_reopen_asset(user, asset: Asset) -> bool:
    """Check if the user can bring an asset back from an inactive status.

    Reopening is treated like creating the asset again.
    """
    return can_create_asset(user, asset.catalog)
