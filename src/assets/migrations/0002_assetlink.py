import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("assets", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AssetLink",
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
                    "link_type",
                    models.CharField(
                        choices=[
                            ("refers_to", "Refers to"),
                            ("depends_on", "Depends on"),
                            ("member_of", "Member of"),
                        ],
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "base",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="links",
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
                    "target",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="incoming_links",
                        to="assets.asset",
                    ),
                ),
            ],
            options={
                "ordering": ["link_type", "pk"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("base", "target", "link_type"),
                        name="unique_asset_link",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("base", models.F("target")), _negated=True
                        ),
                        name="assetlink_not_self",
                    ),
                ],
            },
        ),
        migrations.AlterField(
            model_name="transaction",
            name="action",
            field=models.CharField(
                choices=[
                    ("create", "Create"),
                    ("set", "Set"),
                    ("status", "Status"),
                    ("add_role_member", "Add Role Member"),
                    ("delete_role_member", "Delete Role Member"),
                    ("custom_field", "Custom Field"),
                    ("add_link", "Add Link"),
                    ("delete_link", "Delete Link"),
                ],
                max_length=32,
            ),
        ),
    ]
