"""Custom user model for the asset tracker."""

from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """User with a display name and a unique email address.

    Users can be named by username or email when assigning asset roles.
    """

    display_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Human-readable name shown in asset history",
    )
    email = models.EmailField("email address", blank=False, unique=True)

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"

    def get_display_name(self):
        """Return display_name if set, otherwise full name or username."""
        if self.display_name:
            return self.display_name
        full = self.get_full_name()
        return full if full else self.username

    def __str__(self):
        return self.get_display_name()
