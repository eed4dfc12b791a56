from django.apps import AppConfig


class BackendConfig(AppConfig):
    name = "apps.backend"
    label = "backend"
    verbose_name = "REST backend"
