"""
Accounts App Configuration
"""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Configuration for roles and permissions."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'accounts'
    verbose_name = 'Accounts & Roles'
