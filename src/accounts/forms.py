"""Forms for the accounts app."""

from django.contrib.auth.forms import (
    AdminUserCreationForm,
    UserChangeForm,
)

from .models import CustomUser


class CustomUserCreationForm(AdminUserCreationForm):
    class Meta:
        model = CustomUser
        fields = ("username", "email", "display_name")


class CustomUserChangeForm(UserChangeForm):
    class Meta:
        model = CustomUser
        fields = (
            "username",
            "email",
            "display_name",
            "first_name",
            "last_name",
        )
