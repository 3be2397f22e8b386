# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_MEMBER = "member"
    ROLE_CORE = "core"

    ROLE_CHOICES = (
        (ROLE_MEMBER, 'Member'),
        (ROLE_CORE, 'Core Team'),
    )

    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default=ROLE_MEMBER
    )

    full_name = models.CharField(max_length=255, blank=True, default="")
    bio = models.TextField(blank=True, null=True)
    avatar_url = models.CharField(max_length=1024, blank=True, null=True)

    # Supabase auth user id (sub claim) when the account was provisioned from a Supabase token
    supabase_id = models.CharField(max_length=64, blank=True, null=True, unique=True)

    @property
    def is_core(self):
        return self.role == self.ROLE_CORE or self.is_superuser

    @property
    def display_name(self):
        return self.full_name or self.get_full_name() or self.username

    def __str__(self):
        return self.username
