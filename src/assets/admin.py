"""Admin configuration for assets app using django-unfold."""

from unfold.admin import ModelAdmin, TabularInline
from unfold.contrib.filters.admin import (
    ChoicesDropdownFilter,
    RelatedDropdownFilter,
)
from unfold.decorators import action, display

from django import forms
from django.contrib import admin, messages
from django.core.exceptions import PermissionDenied, ValidationError
from django.db.models import Count

from .lifecycles import get_gate
from .models import (
    Asset,
    AssetLink,
    AssetRole,
    Catalog,
    CustomField,
    CustomFieldValue,
    Transaction,
)
from .services.permissions import can_reopen_asset
from .services.records import (
    create_asset,
    reopen_denied_message,
    set_status,
    update_asset,
)


class AssetAdminForm(forms.ModelForm):
    """Validates status changes against the catalog's lifecycle."""

    status = forms.CharField(
        required=False,
        max_length=64,
        help_text="Leave blank on creation to use the lifecycle default",
    )

    class Meta:
        model = Asset
        fields = ["name", "description", "catalog", "status"]

    # Set by AssetAdmin.get_form; reopening checks need the acting user.
    request_user = None

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if "catalog" in self.fields:
            self.fields["catalog"].queryset = Catalog.objects.filter(
                disabled=False
            )
        if self.instance.pk is not None:
            lifecycle = self.instance.lifecycle_obj
            allowed = lifecycle.transitions_from(self.instance.status)
            if allowed:
                self.fields["status"].help_text = (
                    f"Allowed next statuses: {', '.join(allowed)}"
                )
            else:
                self.fields["status"].help_text = (
                    f"'{self.instance.status}' is a final status"
                )

    def clean(self):
        cleaned = super().clean()
        gate = get_gate()
        status = cleaned.get("status")
        try:
            if self.instance.pk is None:
                catalog = cleaned.get("catalog")
                if catalog is not None:
                    cleaned["status"] = gate.check_create(
                        catalog.lifecycle, status
                    )
                return cleaned
            if status == self.instance.status:
                return cleaned
            gate.check_update(self.instance, status)
        except ValidationError as e:
            self.add_error("status", e)
            return cleaned

        old_status = self.instance.status
        lifecycle = gate.lifecycle(self.instance.lifecycle)
        if (
            self.request_user is not None
            and lifecycle.is_reopening(old_status, status)
            and not can_reopen_asset(self.request_user, self.instance)
        ):
            self.add_error("status", reopen_denied_message(old_status))
        return cleaned


class AssetRoleInline(TabularInline):
    model = AssetRole
    extra = 0
    fields = ["role", "user", "group", "created_at"]
    readonly_fields = ["role", "user", "group", "created_at"]
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class CustomFieldValueInline(TabularInline):
    model = CustomFieldValue
    extra = 0
    fields = ["field", "value", "created_by", "created_at"]
    readonly_fields = ["field", "value", "created_by", "created_at"]
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class AssetLinkInline(TabularInline):
    model = AssetLink
    fk_name = "base"
    extra = 0
    fields = ["link_type", "target", "created_by", "created_at"]
    readonly_fields = ["link_type", "target", "created_by", "created_at"]
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class TransactionInline(TabularInline):
    model = Transaction
    extra = 0
    fields = ["created_at", "created_by", "brief_description"]
    readonly_fields = ["created_at", "created_by", "brief_description"]
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Catalog)
class CatalogAdmin(ModelAdmin):
    list_display = [
        "name",
        "lifecycle",
        "display_disabled",
        "display_asset_count",
    ]
    list_filter = ["disabled", "lifecycle"]
    search_fields = ["name", "description"]
    readonly_fields = ["created_at", "updated_at"]

    def get_queryset(self, request):
        return (
            super()
            .get_queryset(request)
            .annotate(_asset_count=Count("assets"))
        )

    @display(description="Disabled", boolean=True)
    def display_disabled(self, obj):
        return obj.disabled

    @display(description="Assets", ordering="_asset_count")
    def display_asset_count(self, obj):
        return obj._asset_count

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.assets.exists():
            return False
        return super().has_delete_permission(request, obj)


@admin.register(Asset)
class AssetAdmin(ModelAdmin):
    form = AssetAdminForm
    list_display = [
        "display_header",
        "display_status",
        "catalog",
        "display_owner",
        "updated_at",
    ]
    list_filter = [
        ("catalog", RelatedDropdownFilter),
        "status",
    ]
    list_filter_submit = True
    search_fields = ["name", "description"]
    readonly_fields = [
        "created_by",
        "created_at",
        "updated_by",
        "updated_at",
    ]
    inlines = [
        AssetRoleInline,
        CustomFieldValueInline,
        AssetLinkInline,
        TransactionInline,
    ]
    actions = ["mark_deleted"]

    fieldsets = (
        (None, {"fields": ("name", "description", "catalog", "status")}),
        (
            "Tracking",
            {
                "fields": (
                    "created_by",
                    "created_at",
                    "updated_by",
                    "updated_at",
                ),
                "classes": ["tab"],
            },
        ),
    )

    def get_form(self, request, obj=None, **kwargs):
        form = super().get_form(request, obj, **kwargs)
        form.request_user = request.user
        return form

    def get_readonly_fields(self, request, obj=None):
        fields = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            # Catalog moves need status mapping; not offered here.
            fields.append("catalog")
        return fields

    @display(description="Asset", header=True, ordering="name")
    def display_header(self, obj):
        return str(obj), f"#{obj.pk}"

    @display(description="Status", label=True, ordering="status")
    def display_status(self, obj):
        return obj.status

    @display(description="Owner")
    def display_owner(self, obj):
        return obj.owner or "-"

    def save_model(self, request, obj, form, change):
        if not change:
            result = create_asset(
                request.user,
                form.cleaned_data["catalog"],
                name=form.cleaned_data.get("name", ""),
                description=form.cleaned_data.get("description", ""),
                status=form.cleaned_data.get("status"),
            )
            obj.pk = result.asset.pk
            obj._state.adding = False
            obj.status = result.asset.status
            obj.created_by = result.asset.created_by
            obj.created_at = result.asset.created_at
            return
        for field_name in ("name", "description", "status"):
            if field_name in form.changed_data:
                update_asset(
                    obj,
                    request.user,
                    field_name,
                    form.cleaned_data[field_name],
                )

    def has_delete_permission(self, request, obj=None):
        return False

    @action(description="Mark selected assets as deleted")
    def mark_deleted(self, request, queryset):
        done = 0
        for asset in queryset:
            try:
                set_status(asset, request.user, "deleted")
            except (ValidationError, PermissionDenied) as e:
                reasons = getattr(e, "messages", [str(e)])
                messages.error(request, f"{asset}: {'; '.join(reasons)}")
            else:
                done += 1
        if done:
            messages.success(request, f"{done} asset(s) marked as deleted.")


@admin.register(CustomField)
class CustomFieldAdmin(ModelAdmin):
    list_display = ["name", "max_values", "display_disabled"]
    list_filter = ["disabled"]
    search_fields = ["name", "description"]
    filter_horizontal = ["catalogs"]

    @display(description="Disabled", boolean=True)
    def display_disabled(self, obj):
        return obj.disabled


@admin.register(Transaction)
class TransactionAdmin(ModelAdmin):
    list_display = [
        "asset",
        "display_action",
        "brief_description",
        "created_by",
        "created_at",
    ]
    list_filter = [("action", ChoicesDropdownFilter)]
    search_fields = ["asset__name", "old_value", "new_value"]
    date_hierarchy = "created_at"
    readonly_fields = [
        "asset",
        "action",
        "field",
        "old_value",
        "new_value",
        "created_by",
        "created_at",
    ]

    @display(
        description="Action",
        label={
            "create": "success",
            "status": "warning",
            "set": "info",
            "custom_field": "info",
            "add_role_member": "default",
            "delete_role_member": "danger",
            "add_link": "default",
            "delete_link": "danger",
        },
    )
    def display_action(self, obj):
        return obj.action

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
