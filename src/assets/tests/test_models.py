"""Tests for asset models and database layer."""

import pytest

from django.core.exceptions import ValidationError
from django.db import IntegrityError

from assets.factories import (
    AssetFactory,
    AssetLinkFactory,
    AssetRoleFactory,
    CatalogFactory,
    CustomFieldFactory,
    GroupFactory,
    TransactionFactory,
)
from assets.models import (
    Asset,
    AssetLink,
    AssetRole,
    Catalog,
    Transaction,
    is_valid_name,
)

# ============================================================
# MODEL TESTS
# ============================================================


class TestCatalog:
    def test_str(self, catalog):
        assert str(catalog) == "IT Equipment"

    def test_default_lifecycle(self, db):
        catalog = Catalog.objects.create(name="Furniture")
        assert catalog.lifecycle == "assets"
        assert catalog.lifecycle_obj.default_on_create == "new"

    def test_unknown_lifecycle_rejected(self, db):
        catalog = Catalog(name="Odd", lifecycle="nope")
        with pytest.raises(ValidationError, match="not a configured"):
            catalog.full_clean()

    def test_ordering(self, db):
        CatalogFactory(name="Zzz")
        CatalogFactory(name="Aaa")
        names = list(Catalog.objects.values_list("name", flat=True))
        assert names == sorted(names)

    def test_lookup_by_id_and_name(self, catalog):
        assert Catalog.objects.lookup(catalog.pk) == catalog
        assert Catalog.objects.lookup(str(catalog.pk)) == catalog
        assert Catalog.objects.lookup("IT Equipment") == catalog
        assert Catalog.objects.lookup(catalog) is catalog

    def test_lookup_missing(self, db):
        assert Catalog.objects.lookup("Nothing") is None
        assert Catalog.objects.lookup(999) is None
        assert Catalog.objects.lookup("") is None
        assert Catalog.objects.lookup(None) is None


class TestAssetName:
    @pytest.mark.parametrize("name", ["", "Laptop", "42a", "a42", " 42"])
    def test_valid(self, name):
        assert is_valid_name(name)

    @pytest.mark.parametrize("name", ["4", "42", "0007"])
    def test_all_digits_invalid(self, name):
        assert not is_valid_name(name)

    def test_field_validator(self, asset):
        asset.name = "12345"
        with pytest.raises(ValidationError, match="all digits"):
            asset.full_clean()


class TestAsset:
    def test_str(self, asset):
        assert str(asset) == "Laptop 42"

    def test_str_without_name(self, catalog):
        asset = AssetFactory(name="", catalog=catalog)
        assert str(asset) == f"Asset #{asset.pk}"

    def test_lifecycle_comes_from_catalog(self, asset):
        assert asset.lifecycle == "assets"
        assert asset.lifecycle_obj.name == "assets"

    def test_lookup_by_id_or_name(self, asset):
        assert Asset.objects.lookup(asset.pk) == asset
        assert Asset.objects.lookup("Laptop 42") == asset

    def test_numeric_string_loads_by_id(self, asset):
        AssetFactory(name=f"x{asset.pk}", catalog=asset.catalog)
        assert Asset.objects.lookup(str(asset.pk)) == asset

    def test_clean_rejects_status_outside_lifecycle(self, asset):
        asset.status = "archived"
        with pytest.raises(ValidationError) as exc:
            asset.full_clean()
        assert "status" in exc.value.message_dict

    def test_clean_accepts_lifecycle_status(self, asset):
        asset.status = "in-use"
        asset.full_clean()

    def test_delete_is_refused(self, asset):
        with pytest.raises(ValidationError, match="may not be deleted"):
            asset.delete()
        assert Asset.objects.filter(pk=asset.pk).exists()

    def test_catalog_is_protected(self, asset):
        from django.db.models import ProtectedError

        with pytest.raises(ProtectedError):
            asset.catalog.delete()


class TestAssetRole:
    def test_owner_property(self, asset, second_user):
        assert asset.owner is None
        AssetRoleFactory(asset=asset, role=AssetRole.OWNER, user=second_user)
        assert asset.owner == second_user

    def test_role_querysets(self, asset, second_user):
        group = GroupFactory(name="Help Desk")
        AssetRoleFactory(
            asset=asset, role=AssetRole.HELD_BY, user=second_user
        )
        AssetRoleFactory(
            asset=asset, role=AssetRole.CONTACT, user=None, group=group
        )
        assert [r.principal for r in asset.held_by()] == [second_user]
        assert [r.principal for r in asset.contacts()] == [group]

    def test_str(self, asset, second_user):
        role = AssetRoleFactory(
            asset=asset, role=AssetRole.OWNER, user=second_user
        )
        assert str(role) == "Owner: Second User"

    def test_single_owner_constraint(self, asset, user, second_user):
        AssetRoleFactory(asset=asset, role=AssetRole.OWNER, user=user)
        with pytest.raises(IntegrityError):
            AssetRoleFactory(
                asset=asset, role=AssetRole.OWNER, user=second_user
            )

    def test_requires_exactly_one_principal(self, asset):
        with pytest.raises(IntegrityError):
            AssetRole.objects.create(asset=asset, role=AssetRole.CONTACT)


class TestCustomField:
    def test_applies_to_all_catalogs_by_default(self, catalog):
        field = CustomFieldFactory(name="Serial Number")
        assert field.applies_to(catalog)

    def test_restricted_to_catalogs(self, catalog):
        other = CatalogFactory(name="Furniture")
        field = CustomFieldFactory(name="Serial Number", catalogs=[other])
        assert field.applies_to(other)
        assert not field.applies_to(catalog)

    def test_values_for(self, asset, user):
        from assets.models import CustomFieldValue

        field = CustomFieldFactory(name="Tag", max_values=0)
        CustomFieldValue.objects.create(asset=asset, field=field, value="a")
        CustomFieldValue.objects.create(asset=asset, field=field, value="b")
        assert asset.values_for(field) == ["a", "b"]


class TestAssetLink:
    def test_str(self, asset, catalog):
        dock = AssetFactory(name="Dock 7", catalog=catalog)
        link = AssetLinkFactory(
            base=asset, target=dock, link_type=AssetLink.DEPENDS_ON
        )
        assert str(link) == f"{asset.name} depends on Dock 7"

    def test_incoming_links(self, asset, catalog):
        dock = AssetFactory(name="Dock 7", catalog=catalog)
        link = AssetLinkFactory(base=asset, target=dock)
        assert list(dock.incoming_links.all()) == [link]
        assert not asset.incoming_links.exists()

    def test_unique_per_type(self, asset, catalog):
        dock = AssetFactory(name="Dock 7", catalog=catalog)
        AssetLinkFactory(base=asset, target=dock)
        with pytest.raises(IntegrityError):
            AssetLinkFactory(base=asset, target=dock)

    def test_no_self_link(self, asset):
        with pytest.raises(IntegrityError):
            AssetLinkFactory(base=asset, target=asset)


class TestTransaction:
    def test_cannot_modify(self, asset, user):
        txn = TransactionFactory(asset=asset, created_by=user)
        txn.new_value = "Changed"
        with pytest.raises(ValidationError, match="immutable"):
            txn.save()

    def test_cannot_delete(self, asset, user):
        txn = TransactionFactory(asset=asset, created_by=user)
        with pytest.raises(ValidationError, match="immutable"):
            txn.delete()
        assert Transaction.objects.filter(pk=txn.pk).exists()

    @pytest.mark.parametrize(
        "action,field,old,new,expected",
        [
            ("create", "", "", "Laptop", "Asset created"),
            (
                "status",
                "status",
                "new",
                "allocated",
                "Status changed from 'new' to 'allocated'",
            ),
            ("set", "name", "", "Laptop", "Name set to 'Laptop'"),
            (
                "set",
                "description",
                "Old",
                "New",
                "Description changed from 'Old' to 'New'",
            ),
            ("add_role_member", "contact", "", "Sam", "Sam added as Contact"),
            (
                "add_role_member",
                "owner",
                "Sam",
                "Alex",
                "Owner changed from 'Sam' to 'Alex'",
            ),
            (
                "delete_role_member",
                "held_by",
                "Sam",
                "",
                "Sam removed from Held by",
            ),
            ("custom_field", "Serial", "", "X1", "Serial 'X1' added"),
            (
                "add_link",
                "member_of",
                "",
                "Rack 2",
                "Link added: member of Rack 2",
            ),
            (
                "delete_link",
                "refers_to",
                "Rack 2",
                "",
                "Link removed: refers to Rack 2",
            ),
        ],
    )
    def test_brief_description(
        self, asset, user, action, field, old, new, expected
    ):
        txn = TransactionFactory(
            asset=asset,
            created_by=user,
            action=action,
            field=field,
            old_value=old,
            new_value=new,
        )
        assert txn.brief_description == expected
