from django.apps import AppConfig


class PurchasingConfig(AppConfig):
    name = 'frontend.purchasing'
