from django.conf import settings
from django.db import models


class Inventory(models.Model):
    """Stock levels for a single variant."""
    variant = models.OneToOneField(
        'catalog.Variant',
        on_delete=models.CASCADE,
        related_name='inventory',
        verbose_name='Variante'
    )
    on_hand = models.PositiveIntegerField(
        default=0,
        verbose_name='Em mãos'
    )
    available = models.PositiveIntegerField(
        default=0,
        verbose_name='Disponível'
    )
    reserved = models.PositiveIntegerField(
        default=0,
        verbose_name='Reservado'
    )
    committed = models.PositiveIntegerField(
        default=0,
        verbose_name='Comprometido'
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Atualizado em'
    )

    class Meta:
        verbose_name = 'Estoque'
        verbose_name_plural = 'Estoques'

    def __str__(self):
        return f"{self.variant.sku}: {self.available} disponíveis"


class InventoryTracking(models.Model):
    """
    Audit trail of stock adjustments.
    Created by InventoryService.adjust for every change.
    """
    TYPE_RESTOCK = 'restock'
    TYPE_ADJUSTMENT_DECREASE = 'adjustment_decrease'
    TYPE_CHOICES = [
        (TYPE_RESTOCK, 'Reposição'),
        (TYPE_ADJUSTMENT_DECREASE, 'Ajuste (redução)'),
    ]

    variant = models.ForeignKey(
        'catalog.Variant',
        on_delete=models.CASCADE,
        related_name='inventory_tracking',
        verbose_name='Variante'
    )
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.CASCADE,
        related_name='inventory_tracking',
        verbose_name='Produto'
    )
    type = models.CharField(
        max_length=30,
        choices=TYPE_CHOICES,
        verbose_name='Tipo'
    )
    quantity = models.PositiveIntegerField(
        verbose_name='Quantidade'
    )
    previous_available = models.IntegerField(verbose_name='Disponível anterior')
    new_available = models.IntegerField(verbose_name='Novo disponível')
    previous_reserved = models.IntegerField(verbose_name='Reservado anterior')
    new_reserved = models.IntegerField(verbose_name='Novo reservado')
    reason = models.TextField(
        blank=True,
        verbose_name='Motivo'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        verbose_name='Alterado por'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Criado em'
    )

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Movimentação de Estoque'
        verbose_name_plural = 'Movimentações de Estoque'

    def __str__(self):
        return f"{self.variant.sku} - {self.get_type_display()}: {self.quantity}"

    @property
    def available_difference(self):
        return self.new_available - self.previous_available
