from django.contrib.auth.models import AbstractUser
from django.db import models


class Merchant(models.Model):
    """
    Tenant account for a store owner.
    Stores, suppliers and products are always scoped to one merchant.
    """
    name = models.CharField(max_length=255, unique=True)
    code = models.CharField(
        max_length=50,
        unique=True,
        help_text='Unique identifier code for the merchant (e.g., SHOP001)'
    )
    contact_email = models.EmailField(blank=True, null=True)
    contact_phone = models.CharField(max_length=20, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'merchants'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})"


class User(AbstractUser):
    """
    Admin panel user.
    Roles: OWNER manages everything including deletes, STAFF edits
    catalog and stock, VIEWER only reads.
    """

    class Role(models.TextChoices):
        OWNER = 'OWNER', 'Owner'
        STAFF = 'STAFF', 'Staff'
        VIEWER = 'VIEWER', 'Viewer'

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.VIEWER,
        help_text='User role for permission management'
    )
    phone = models.CharField(max_length=20, blank=True, null=True)
    merchant = models.ForeignKey(
        Merchant,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='users',
        help_text='Merchant this user works for. Null for platform staff.'
    )

    class Meta:
        db_table = 'users'
        ordering = ['-date_joined']

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"

    @property
    def is_owner(self):
        return self.role == self.Role.OWNER

    @property
    def can_edit(self):
        return self.role in (self.Role.OWNER, self.Role.STAFF)
