from django.apps import AppConfig


class CatalogConfig(AppConfig):
    name = 'frontend.catalog'
