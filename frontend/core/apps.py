from django.apps import AppConfig


class CoreConfig(AppConfig):
    name = 'frontend.core'

    def ready(self):
        """Import signals when app is ready"""
        import frontend.core.signals  # noqa: F401
