from django.apps import AppConfig


class PartiesConfig(AppConfig):
    name = 'frontend.parties'
