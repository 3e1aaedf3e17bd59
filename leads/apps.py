from django.apps import AppConfig


class LeadsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'leads'
    verbose_name = 'Leads'

    def ready(self):
        # Import signal handlers when app is ready
        import leads.signals  # noqa
