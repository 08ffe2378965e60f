"""Models for asset tracking."""

import re

from django.conf import settings
from django.contrib.auth.models import Group
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .lifecycles import get_gate


def default_lifecycle():
    return settings.ASSET_DEFAULT_LIFECYCLE


def validate_lifecycle_name(value):
    if value not in get_gate().names:
        raise ValidationError(f"'{value}' is not a configured lifecycle.")


def is_valid_name(name) -> bool:
    """Names may be empty, otherwise they need at least one non-digit."""
    if not name:
        return True
    return re.search(r"\D", name) is not None


def validate_asset_name(value):
    if not is_valid_name(value):
        raise ValidationError("Invalid name (names may not be all digits)")


class LookupManager(models.Manager):
    """Manager for records addressable by numeric id or by name."""

    def lookup(self, identifier):
        if identifier is None or identifier == "":
            return None
        if isinstance(identifier, self.model):
            return identifier
        value = str(identifier)
        if re.search(r"\D", value):
            return self.filter(name=value).order_by("pk").first()
        return self.filter(pk=int(value)).first()


class Catalog(models.Model):
    """Grouping of assets that share a lifecycle."""

    name = models.CharField(max_length=255, unique=True)
    description = models.CharField(max_length=255, blank=True)
    lifecycle = models.CharField(
        max_length=32,
        default=default_lifecycle,
        validators=[validate_lifecycle_name],
        help_text="Name of a lifecycle defined in ASSET_LIFECYCLES",
    )
    disabled = models.BooleanField(
        default=False,
        help_text="Disabled catalogs accept no new assets",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LookupManager()

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def lifecycle_obj(self):
        return get_gate().lifecycle(self.lifecycle)


class Asset(models.Model):
    """A single inventory item governed by its catalog's lifecycle."""

    name = models.CharField(
        max_length=255, blank=True, validators=[validate_asset_name]
    )
    description = models.CharField(max_length=255, blank=True)
    catalog = models.ForeignKey(
        Catalog,
        on_delete=models.PROTECT,
        related_name="assets",
    )
    status = models.CharField(max_length=64)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="created_assets",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="updated_assets",
    )
    updated_at = models.DateTimeField(auto_now=True)

    objects = LookupManager()

    class Meta:
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["status"], name="idx_asset_status"),
            models.Index(fields=["name"], name="idx_asset_name"),
        ]

    def __str__(self):
        if self.name:
            return self.name
        return f"Asset #{self.pk}"

    @property
    def lifecycle(self):
        return self.catalog.lifecycle

    @property
    def lifecycle_obj(self):
        return self.catalog.lifecycle_obj

    def clean_fields(self, exclude=None):
        # Forms exclude status once they have rejected it.
        errors = {}
        try:
            super().clean_fields(exclude=exclude)
        except ValidationError as e:
            errors = e.update_error_dict(errors)
        skip = exclude is not None and "status" in exclude
        if (
            not skip
            and "status" not in errors
            and self.catalog_id
            and not self.lifecycle_obj.is_valid(self.status)
        ):
            errors["status"] = [
                f"Status '{self.status}' isn't a valid status for assets."
            ]
        if errors:
            raise ValidationError(errors)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "Assets may not be deleted. Set the status to 'deleted' instead."
        )

    @property
    def owner(self):
        """Return the user holding the Owner role, or None."""
        role = self.roles.filter(role=AssetRole.OWNER).first()
        return role.user if role else None

    def held_by(self):
        return self.roles.filter(role=AssetRole.HELD_BY)

    def contacts(self):
        return self.roles.filter(role=AssetRole.CONTACT)

    def values_for(self, field):
        """Return the values stored for a custom field, oldest first."""
        return list(
            self.custom_field_values.filter(field=field).values_list(
                "value", flat=True
            )
        )


class AssetRole(models.Model):
    """A principal (user or group) holding a role on one asset."""

    OWNER = "owner"
    HELD_BY = "held_by"
    CONTACT = "contact"

    ROLE_CHOICES = [
        (OWNER, "Owner"),
        (HELD_BY, "Held by"),
        (CONTACT, "Contact"),
    ]

    # Roles that hold at most one principal, and only a user
    SINGLE_ROLES = frozenset({OWNER})

    asset = models.ForeignKey(
        Asset, on_delete=models.CASCADE, related_name="roles"
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="asset_roles",
    )
    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="asset_roles",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["role", "pk"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(user__isnull=False, group__isnull=True)
                    | models.Q(user__isnull=True, group__isnull=False)
                ),
                name="assetrole_single_principal",
            ),
            models.UniqueConstraint(
                fields=["asset", "role", "user"],
                condition=models.Q(user__isnull=False),
                name="unique_asset_role_user",
            ),
            models.UniqueConstraint(
                fields=["asset", "role", "group"],
                condition=models.Q(group__isnull=False),
                name="unique_asset_role_group",
            ),
            models.UniqueConstraint(
                fields=["asset"],
                condition=models.Q(role="owner"),
                name="unique_asset_owner",
            ),
        ]

    def __str__(self):
        return f"{self.get_role_display()}: {self.principal}"

    @property
    def principal(self):
        return self.user if self.user_id else self.group


class CustomField(models.Model):
    """Extra attribute that can be recorded against assets."""

    name = models.CharField(max_length=200, unique=True)
    description = models.CharField(max_length=255, blank=True)
    max_values = models.PositiveIntegerField(
        default=1,
        help_text="Maximum number of values per asset (0 for unlimited)",
    )
    catalogs = models.ManyToManyField(
        Catalog,
        blank=True,
        related_name="custom_fields",
        help_text="Leave empty to apply to every catalog",
    )
    disabled = models.BooleanField(default=False)

    objects = LookupManager()

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def applies_to(self, catalog) -> bool:
        if not self.catalogs.exists():
            return True
        return self.catalogs.filter(pk=catalog.pk).exists()


class CustomFieldValue(models.Model):
    asset = models.ForeignKey(
        Asset, on_delete=models.CASCADE, related_name="custom_field_values"
    )
    field = models.ForeignKey(
        CustomField, on_delete=models.CASCADE, related_name="values"
    )
    value = models.CharField(max_length=255)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["field", "pk"]

    def __str__(self):
        return f"{self.field.name}: {self.value}"


class AssetLink(models.Model):
    """A typed link from one asset (the base) to another (the target)."""

    REFERS_TO = "refers_to"
    DEPENDS_ON = "depends_on"
    MEMBER_OF = "member_of"

    LINK_TYPE_CHOICES = [
        (REFERS_TO, "Refers to"),
        (DEPENDS_ON, "Depends on"),
        (MEMBER_OF, "Member of"),
    ]

    base = models.ForeignKey(
        Asset, on_delete=models.CASCADE, related_name="links"
    )
    target = models.ForeignKey(
        Asset, on_delete=models.CASCADE, related_name="incoming_links"
    )
    link_type = models.CharField(max_length=20, choices=LINK_TYPE_CHOICES)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["link_type", "pk"]
        constraints = [
            models.UniqueConstraint(
                fields=["base", "target", "link_type"],
                name="unique_asset_link",
            ),
            models.CheckConstraint(
                condition=~models.Q(base=models.F("target")),
                name="assetlink_not_self",
            ),
        ]

    def __str__(self):
        return (
            f"{self.base} {self.get_link_type_display().lower()} "
            f"{self.target}"
        )


class Transaction(models.Model):
    """Immutable audit log of every change made to an asset."""

    ACTION_CHOICES = [
        ("create", "Create"),
        ("set", "Set"),
        ("status", "Status"),
        ("add_role_member", "Add Role Member"),
        ("delete_role_member", "Delete Role Member"),
        ("custom_field", "Custom Field"),
        ("add_link", "Add Link"),
        ("delete_link", "Delete Link"),
    ]

    asset = models.ForeignKey(
        Asset, on_delete=models.CASCADE, related_name="transactions"
    )
    action = models.CharField(max_length=32, choices=ACTION_CHOICES)
    field = models.CharField(max_length=64, blank=True)
    old_value = models.CharField(max_length=255, blank=True)
    new_value = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="asset_transactions",
        help_text="The user who made the change",
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at", "-pk"]
        indexes = [
            models.Index(
                fields=["created_at"], name="idx_transaction_created_at"
            ),
            models.Index(fields=["action"], name="idx_transaction_action"),
        ]

    def __str__(self):
        return f"{self.asset} - {self.brief_description}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValidationError(
                "Transactions are immutable and cannot be modified."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "Transactions are immutable and cannot be deleted."
        )

    @property
    def brief_description(self):
        label = self.field.replace("_", " ").capitalize()
        if self.action == "create":
            return "Asset created"
        if self.action == "status":
            return (
                f"Status changed from '{self.old_value}' "
                f"to '{self.new_value}'"
            )
        if self.action in ("add_role_member", "delete_role_member"):
            role = dict(AssetRole.ROLE_CHOICES).get(self.field, label)
            if self.action == "delete_role_member":
                return f"{self.old_value} removed from {role}"
            if self.old_value:
                return (
                    f"{role} changed from '{self.old_value}' "
                    f"to '{self.new_value}'"
                )
            return f"{self.new_value} added as {role}"
        if self.action == "custom_field":
            if self.old_value:
                return (
                    f"{self.field} '{self.old_value}' changed "
                    f"to '{self.new_value}'"
                )
            return f"{self.field} '{self.new_value}' added"
        if self.action in ("add_link", "delete_link"):
            kind = dict(AssetLink.LINK_TYPE_CHOICES).get(self.field, label)
            if self.action == "delete_link":
                return f"Link removed: {kind.lower()} {self.old_value}"
            return f"Link added: {kind.lower()} {self.new_value}"
        if not self.old_value:
            return f"{label} set to '{self.new_value}'"
        return f"{label} changed from '{self.old_value}' to '{self.new_value}'"
