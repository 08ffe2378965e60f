"""Management command to create the standard permission groups."""

from django.contrib.auth.models import Group, Permission
from django.core.management.base import BaseCommand

# Group name -> permission codenames in the assets app
GROUP_PERMISSIONS = {
    "Asset Admin": [
        "view_asset",
        "add_asset",
        "change_asset",
        "view_catalog",
        "add_catalog",
        "change_catalog",
        "delete_catalog",
        "view_customfield",
        "add_customfield",
        "change_customfield",
        "delete_customfield",
        "view_transaction",
    ],
    "Asset Editor": [
        "view_asset",
        "add_asset",
        "change_asset",
        "view_catalog",
        "view_customfield",
        "view_transaction",
    ],
    "Asset Viewer": [
        "view_asset",
        "view_catalog",
        "view_transaction",
    ],
}


def ensure_group(name):
    """Create or update one group from GROUP_PERMISSIONS."""
    group, _ = Group.objects.get_or_create(name=name)
    perms = Permission.objects.filter(
        content_type__app_label="assets",
        codename__in=GROUP_PERMISSIONS[name],
    )
    group.permissions.set(perms)
    return group


class Command(BaseCommand):
    help = "Create the asset permission groups with appropriate permissions"

    def handle(self, *args, **options):
        for name in GROUP_PERMISSIONS:
            ensure_group(name)
            self.stdout.write(
                self.style.SUCCESS(f"Created/updated '{name}' group")
            )
        self.stdout.write(
            self.style.SUCCESS("All permission groups configured.")
        )
