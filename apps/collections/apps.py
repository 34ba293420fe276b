from django.apps import AppConfig


class CollectionsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.collections'
    label = 'collections'
    verbose_name = 'Coleções'

    def ready(self):
        from . import signals  # noqa: F401
