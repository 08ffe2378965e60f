"""Factory Boy factories for asset test data generation."""

import factory
from factory.django import DjangoModelFactory


class UserFactory(DjangoModelFactory):
    """Factory for CustomUser model."""

    class Meta:
        model = "accounts.CustomUser"
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    display_name = factory.Faker("name")
    is_active = True

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        pwd = extracted or "testpass123!"
        self.set_password(pwd)
        if create:
            self.save(update_fields=["password"])


class GroupFactory(DjangoModelFactory):
    class Meta:
        model = "auth.Group"

    name = factory.Sequence(lambda n: f"Group {n}")


class CatalogFactory(DjangoModelFactory):
    """Factory for Catalog model."""

    class Meta:
        model = "assets.Catalog"

    name = factory.Sequence(lambda n: f"Catalog {n}")
    description = factory.Faker("sentence", nb_words=4)
    lifecycle = "assets"
    disabled = False


class AssetFactory(DjangoModelFactory):
    """Factory for Asset model.

    Writes the row directly; use ``services.records.create_asset`` when
    the lifecycle gate and change records matter.
    """

    class Meta:
        model = "assets.Asset"

    name = factory.Sequence(lambda n: f"Asset {n}")
    description = factory.Faker("sentence", nb_words=4)
    catalog = factory.SubFactory(CatalogFactory)
    status = "new"
    created_by = factory.SubFactory(UserFactory)


class AssetRoleFactory(DjangoModelFactory):
    class Meta:
        model = "assets.AssetRole"

    asset = factory.SubFactory(AssetFactory)
    role = "contact"
    user = factory.SubFactory(UserFactory)


class AssetLinkFactory(DjangoModelFactory):
    class Meta:
        model = "assets.AssetLink"

    base = factory.SubFactory(AssetFactory)
    target = factory.SubFactory(AssetFactory)
    link_type = "refers_to"


class CustomFieldFactory(DjangoModelFactory):
    """Factory for CustomField model."""

    class Meta:
        model = "assets.CustomField"
        skip_postgeneration_save = True

    name = factory.Sequence(lambda n: f"Field {n}")
    max_values = 1

    @factory.post_generation
    def catalogs(self, create, extracted, **kwargs):
        if create and extracted:
            self.catalogs.set(extracted)


class TransactionFactory(DjangoModelFactory):
    """Factory for Transaction model.

    Transaction.save() blocks updates on existing objects,
    so this factory only creates new instances.
    """

    class Meta:
        model = "assets.Transaction"

    asset = factory.SubFactory(AssetFactory)
    created_by = factory.SubFactory(UserFactory)
    action = "set"
    field = "name"
    old_value = "Old"
    new_value = "New"
