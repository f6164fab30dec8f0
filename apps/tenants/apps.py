from django.apps import AppConfig


class TenantsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.tenants'
    label = 'tenants'
    verbose_name = 'Tenants'

    def ready(self):
        from . import signals  # noqa: F401
