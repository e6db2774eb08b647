from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class BundlemanConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "bundleman"
    verbose_name = _("Pacotes e Combos")
