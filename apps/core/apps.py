from django.apps import AppConfig
from django.utils.module_loading import autodiscover_modules


class CoreConfig(AppConfig):
    name = "apps.core"
    label = "core"
    verbose_name = "Core"

    def ready(self):
        """Import every installed app's ``signals`` module so receivers connect."""
        autodiscover_modules("signals")
