"""Tests for management commands."""

from io import StringIO

import pytest

from django.contrib.auth.models import Group
from django.core.management import call_command

from assets.management.commands.setup_groups import GROUP_PERMISSIONS


def _codenames(name):
    group = Group.objects.get(name=name)
    return set(group.permissions.values_list("codename", flat=True))


@pytest.mark.django_db
class TestSetupGroups:
    def test_creates_groups(self):
        out = StringIO()
        call_command("setup_groups", stdout=out)
        assert set(
            Group.objects.values_list("name", flat=True)
        ) >= set(GROUP_PERMISSIONS)
        assert "All permission groups configured." in out.getvalue()

    def test_permissions(self):
        call_command("setup_groups", stdout=StringIO())
        for name, codenames in GROUP_PERMISSIONS.items():
            assert _codenames(name) == set(codenames)

    def test_nobody_may_delete_assets(self):
        call_command("setup_groups", stdout=StringIO())
        for name in GROUP_PERMISSIONS:
            assert "delete_asset" not in _codenames(name)

    def test_is_idempotent(self):
        call_command("setup_groups", stdout=StringIO())
        group = Group.objects.get(name="Asset Viewer")
        group.permissions.clear()
        call_command("setup_groups", stdout=StringIO())
        assert Group.objects.filter(name="Asset Viewer").count() == 1
        assert _codenames("Asset Viewer") == {
            "view_asset",
            "view_catalog",
            "view_transaction",
        }
