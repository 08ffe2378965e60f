"""Admin configuration for accounts app."""

from unfold.admin import ModelAdmin
from unfold.decorators import display

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from django.contrib.auth.models import Group
from django.db.models import Count
from django.urls import reverse
from django.utils.html import format_html

from .forms import CustomUserChangeForm, CustomUserCreationForm
from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin, ModelAdmin):
    add_form = CustomUserCreationForm
    form = CustomUserChangeForm
    model = CustomUser
    list_display = [
        "display_user",
        "email",
        "display_groups",
        "display_staff",
        "display_active",
    ]
    list_filter = ["is_active", "is_staff", "is_superuser", "groups"]
    search_fields = [
        "username",
        "email",
        "display_name",
        "first_name",
        "last_name",
    ]
    filter_horizontal = ["groups", "user_permissions"]
    fieldsets = (
        (
            "Profile",
            {
                "classes": ["tab"],
                "fields": (
                    "username",
                    "password",
                    "display_name",
                    "first_name",
                    "last_name",
                    "email",
                ),
            },
        ),
        (
            "Permissions",
            {
                "classes": ["tab"],
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
            },
        ),
        (
            "Activity",
            {
                "classes": ["tab"],
                "fields": ("last_login", "date_joined"),
            },
        ),
    )
    readonly_fields = ["last_login", "date_joined"]
    add_fieldsets = UserAdmin.add_fieldsets + (
        ("Additional Info", {"fields": ("email", "display_name")}),
    )

    @display(description="User", header=True, ordering="username")
    def display_user(self, obj):
        name = obj.display_name or obj.get_full_name() or obj.username
        return name, obj.username

    @display(description="Groups")
    def display_groups(self, obj):
        groups = obj.groups.all()
        if groups:
            return ", ".join(g.name for g in groups)
        return "-"

    @display(description="Staff", boolean=True)
    def display_staff(self, obj):
        return obj.is_staff

    @display(description="Active", boolean=True)
    def display_active(self, obj):
        return obj.is_active


# Unregister the default Group admin and register with UnfoldAdmin
admin.site.unregister(Group)


@admin.register(Group)
class CustomGroupAdmin(ModelAdmin):
    list_display = [
        "name",
        "display_user_count",
        "display_role_count",
        "display_users_link",
    ]
    search_fields = ["name"]
    filter_horizontal = ["permissions"]

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.annotate(
            user_count=Count("user", distinct=True),
            role_count=Count("asset_roles", distinct=True),
        )

    @display(description="Users", ordering="user_count")
    def display_user_count(self, obj):
        return obj.user_count

    @display(description="Asset roles", ordering="role_count")
    def display_role_count(self, obj):
        return obj.role_count

    @display(description="View Users")
    def display_users_link(self, obj):
        url = reverse("admin:accounts_customuser_changelist")
        return format_html(
            '<a href="{}?groups__id__exact={}">View users</a>',
            url,
            obj.pk,
        )
