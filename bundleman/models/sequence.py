"""SequenceCounter model."""

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class SequenceCounter(models.Model):
    """
    Last value issued for a scope key.

    Created lazily on first allocation, incremented atomically,
    never decremented.
    """

    scope_key = models.CharField(_("escopo"), max_length=120, unique=True)
    last_value = models.BigIntegerField(
        _("último valor"),
        default=0,
        validators=[MinValueValidator(0)],
    )

    created_at = models.DateTimeField(_("criado em"), auto_now_add=True)
    updated_at = models.DateTimeField(_("atualizado em"), auto_now=True)

    class Meta:
        verbose_name = _("contador de sequência")
        verbose_name_plural = _("contadores de sequência")
        ordering = ["scope_key"]

    def __str__(self):
        return f"{self.scope_key} = {self.last_value}"
