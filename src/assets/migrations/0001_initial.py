import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import assets.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Catalog",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=255, unique=True)),
                (
                    "description",
                    models.CharField(blank=True, max_length=255),
                ),
                (
                    "lifecycle",
                    models.CharField(
                        default=assets.models.default_lifecycle,
                        help_text="Name of a lifecycle defined in "
                        "ASSET_LIFECYCLES",
                        max_length=32,
                        validators=[assets.models.validate_lifecycle_name],
                    ),
                ),
                (
                    "disabled",
                    models.BooleanField(
                        default=False,
                        help_text="Disabled catalogs accept no new assets",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Asset",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        blank=True,
                        max_length=255,
                        validators=[assets.models.validate_asset_name],
                    ),
                ),
                (
                    "description",
                    models.CharField(blank=True, max_length=255),
                ),
                ("status", models.CharField(max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "catalog",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assets",
                        to="assets.catalog",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_assets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="updated_assets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-updated_at"],
                "indexes": [
                    models.Index(fields=["status"], name="idx_asset_status"),
                    models.Index(fields=["name"], name="idx_asset_name"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AssetRole",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("owner", "Owner"),
                            ("held_by", "Held by"),
                            ("contact", "Contact"),
                        ],
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "asset",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="roles",
                        to="assets.asset",
                    ),
                ),
                (
                    "group",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="asset_roles",
                        to="auth.group",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="asset_roles",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["role", "pk"],
                "constraints": [
                    models.CheckConstraint(
                        condition=(
                            models.Q(user__isnull=False, group__isnull=True)
                            | models.Q(user__isnull=True, group__isnull=False)
                        ),
                        name="assetrole_single_principal",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(user__isnull=False),
                        fields=("asset", "role", "user"),
                        name="unique_asset_role_user",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(group__isnull=False),
                        fields=("asset", "role", "group"),
                        name="unique_asset_role_group",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(role="owner"),
                        fields=("asset",),
                        name="unique_asset_owner",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CustomField",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=200, unique=True)),
                (
                    "description",
                    models.CharField(blank=True, max_length=255),
                ),
                (
                    "max_values",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Maximum number of values per asset "
                        "(0 for unlimited)",
                    ),
                ),
                ("disabled", models.BooleanField(default=False)),
                (
                    "catalogs",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Leave empty to apply to every catalog",
                        related_name="custom_fields",
                        to="assets.catalog",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="CustomFieldValue",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("value", models.CharField(max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "asset",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="custom_field_values",
                        to="assets.asset",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "field",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="values",
                        to="assets.customfield",
                    ),
                ),
            ],
            options={
                "ordering": ["field", "pk"],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("create", "Create"),
                            ("set", "Set"),
                            ("status", "Status"),
                            ("add_role_member", "Add Role Member"),
                            ("delete_role_member", "Delete Role Member"),
                            ("custom_field", "Custom Field"),
                        ],
                        max_length=32,
                    ),
                ),
                ("field", models.CharField(blank=True, max_length=64)),
                (
                    "old_value",
                    models.CharField(blank=True, max_length=255),
                ),
                (
                    "new_value",
                    models.CharField(blank=True, max_length=255),
                ),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "asset",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transactions",
                        to="assets.asset",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        help_text="The user who made the change",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="asset_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-pk"],
                "indexes": [
                    models.Index(
                        fields=["created_at"],
                        name="idx_transaction_created_at",
                    ),
                    models.Index(
                        fields=["action"], name="idx_transaction_action"
                    ),
                ],
            },
        ),
    ]
