from django.apps import AppConfig


class AnalyticsConfig(AppConfig):
    """
    Analytics App Configuration

    Read-only statistics over posts, comments and users, served through
    cached API endpoints. The app owns no models.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'analytics'
    verbose_name = 'Statistics'
