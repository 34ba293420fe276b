from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class Variant(models.Model):
    """
    Individual SKU of a product.
    A product created without options owns a single default variant
    (is_default=True) that holds its inventory record.
    """
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.CASCADE,
        related_name='variants',
        verbose_name='Produto'
    )
    sku = models.CharField(
        max_length=100,
        unique=True,
        verbose_name='SKU'
    )
    name = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Nome',
        help_text='Nome personalizado (gerado automaticamente se vazio)'
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name='Preço',
        help_text='Deixe vazio para usar o preço do produto'
    )
    position = models.PositiveIntegerField(
        default=0,
        verbose_name='Posição'
    )
    is_default = models.BooleanField(
        default=False,
        verbose_name='Variante padrão'
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Criado em'
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Atualizado em'
    )

    class Meta:
        ordering = ['product', 'position', 'sku']
        verbose_name = 'Variante'
        verbose_name_plural = 'Variantes'

    def __str__(self):
        return self.name or self.sku

    def save(self, *args, **kwargs):
        if not self.name:
            self.name = f"{self.product.name} - {self.sku}"
        super().save(*args, **kwargs)

    @property
    def effective_price(self):
        return self.price if self.price is not None else self.product.price

    @property
    def available(self):
        inventory = getattr(self, 'inventory', None)
        return inventory.available if inventory else 0
