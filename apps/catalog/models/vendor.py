from django.db import models

from .category import unique_slug


class Vendor(models.Model):
    """Supplier / brand that a product is sourced from."""
    name = models.CharField(
        max_length=200,
        verbose_name='Nome'
    )
    slug = models.SlugField(
        max_length=200,
        unique=True,
        verbose_name='Slug'
    )
    email = models.EmailField(
        blank=True,
        verbose_name='E-mail'
    )
    website = models.URLField(
        blank=True,
        verbose_name='Site'
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name='Ativo'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Fornecedor'
        verbose_name_plural = 'Fornecedores'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Vendor, self.name, self.pk)
        super().save(*args, **kwargs)
