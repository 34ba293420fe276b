from django.db import models
from simple_history.models import HistoricalRecords

from apps.catalog.models.category import unique_slug


class Collection(models.Model):
    """
    A named grouping of products shown together in the storefront.

    Membership is either curated by hand (CollectionProduct.is_manual) or
    derived from the collection's rules, combined with `rule_match`.
    """
    RULE_MATCH_ALL = 'all'
    RULE_MATCH_ANY = 'any'
    RULE_MATCH_CHOICES = [
        (RULE_MATCH_ALL, 'Todas as regras'),
        (RULE_MATCH_ANY, 'Qualquer regra'),
    ]

    SORT_MANUAL = 'manual'
    SORT_BEST_SELLING = 'best-selling'
    SORT_ALPHABETICAL_ASC = 'alphabetical-asc'
    SORT_ALPHABETICAL_DESC = 'alphabetical-desc'
    SORT_PRICE_ASC = 'price-asc'
    SORT_PRICE_DESC = 'price-desc'
    SORT_CREATED_ASC = 'created-asc'
    SORT_CREATED_DESC = 'created-desc'
    SORT_ORDER_CHOICES = [
        (SORT_MANUAL, 'Manual'),
        (SORT_BEST_SELLING, 'Mais vendidos'),
        (SORT_ALPHABETICAL_ASC, 'Alfabética A-Z'),
        (SORT_ALPHABETICAL_DESC, 'Alfabética Z-A'),
        (SORT_PRICE_ASC, 'Menor preço'),
        (SORT_PRICE_DESC, 'Maior preço'),
        (SORT_CREATED_ASC, 'Mais antigos'),
        (SORT_CREATED_DESC, 'Mais recentes'),
    ]

    name = models.CharField(
        max_length=255,
        verbose_name='Nome'
    )
    slug = models.SlugField(
        max_length=255,
        unique=True,
        verbose_name='Slug'
    )
    description = models.TextField(
        blank=True,
        verbose_name='Descrição'
    )
    image = models.CharField(
        max_length=500,
        blank=True,
        verbose_name='Imagem',
        help_text='URL da imagem da coleção'
    )
    rule_match = models.CharField(
        max_length=3,
        choices=RULE_MATCH_CHOICES,
        default=RULE_MATCH_ALL,
        verbose_name='Combinação de regras'
    )
    sort_order = models.CharField(
        max_length=20,
        choices=SORT_ORDER_CHOICES,
        default=SORT_MANUAL,
        verbose_name='Ordenação'
    )
    active = models.BooleanField(
        default=True,
        verbose_name='Ativo'
    )

    # SEO
    seo_title = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Título SEO'
    )
    seo_description = models.TextField(
        max_length=500,
        blank=True,
        verbose_name='Descrição SEO'
    )

    # Regeneration bookkeeping
    needs_regeneration = models.BooleanField(
        default=False,
        db_index=True,
        verbose_name='Aguardando regeneração'
    )
    regeneration_requested_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Regeneração solicitada em'
    )
    last_regenerated_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Regenerada em'
    )

    products = models.ManyToManyField(
        'catalog.Product',
        through='CollectionProduct',
        related_name='collections',
        verbose_name='Produtos'
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Criado em'
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Atualizado em'
    )

    # History tracking
    history = HistoricalRecords()

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Coleção'
        verbose_name_plural = 'Coleções'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Collection, self.name, self.pk)
        super().save(*args, **kwargs)


class CollectionRule(models.Model):
    """
    One typed predicate (type + operator + value) of a collection.
    Rules are replaced wholesale whenever the collection is saved.
    """
    TYPE_PRICE = 'price'
    TYPE_COMPARE_AT_PRICE = 'compare_at_price'
    TYPE_INVENTORY = 'inventory'
    TYPE_CATEGORY = 'category'
    TYPE_VENDOR = 'vendor'
    TYPE_TAG = 'tag'
    TYPE_STATUS = 'status'
    RULE_TYPE_CHOICES = [
        (TYPE_PRICE, 'Preço'),
        (TYPE_COMPARE_AT_PRICE, 'Preço comparativo'),
        (TYPE_INVENTORY, 'Estoque'),
        (TYPE_CATEGORY, 'Categoria'),
        (TYPE_VENDOR, 'Fornecedor'),
        (TYPE_TAG, 'Tag'),
        (TYPE_STATUS, 'Status'),
    ]

    OP_EQUALS = 'equals'
    OP_NOT_EQUALS = 'not_equals'
    OP_GREATER_THAN = 'greater_than'
    OP_LESS_THAN = 'less_than'
    OP_GREATER_THAN_OR_EQUALS = 'greater_than_or_equals'
    OP_LESS_THAN_OR_EQUALS = 'less_than_or_equals'
    OP_CONTAINS = 'contains'
    OP_NOT_CONTAINS = 'not_contains'
    OPERATOR_CHOICES = [
        (OP_EQUALS, 'igual a'),
        (OP_NOT_EQUALS, 'diferente de'),
        (OP_GREATER_THAN, 'maior que'),
        (OP_LESS_THAN, 'menor que'),
        (OP_GREATER_THAN_OR_EQUALS, 'maior ou igual a'),
        (OP_LESS_THAN_OR_EQUALS, 'menor ou igual a'),
        (OP_CONTAINS, 'contém'),
        (OP_NOT_CONTAINS, 'não contém'),
    ]

    collection = models.ForeignKey(
        Collection,
        on_delete=models.CASCADE,
        related_name='rules',
        verbose_name='Coleção'
    )
    rule_type = models.CharField(
        max_length=20,
        choices=RULE_TYPE_CHOICES,
        verbose_name='Tipo'
    )
    operator = models.CharField(
        max_length=30,
        choices=OPERATOR_CHOICES,
        verbose_name='Operador'
    )
    value = models.CharField(
        max_length=255,
        verbose_name='Valor'
    )
    position = models.PositiveIntegerField(
        default=0,
        verbose_name='Posição'
    )

    class Meta:
        ordering = ['position', 'id']
        verbose_name = 'Regra da Coleção'
        verbose_name_plural = 'Regras da Coleção'

    def __str__(self):
        return f"{self.get_rule_type_display()} {self.get_operator_display()} {self.value}"


class CollectionProduct(models.Model):
    """Membership of a product in a collection, manual or rule-derived."""
    collection = models.ForeignKey(
        Collection,
        on_delete=models.CASCADE,
        related_name='memberships',
        verbose_name='Coleção'
    )
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.CASCADE,
        related_name='collection_memberships',
        verbose_name='Produto'
    )
    position = models.PositiveIntegerField(
        default=0,
        verbose_name='Posição'
    )
    is_manual = models.BooleanField(
        default=False,
        verbose_name='Adicionado manualmente'
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
        ordering = ['position']
        unique_together = ['collection', 'product']
        verbose_name = 'Produto da Coleção'
        verbose_name_plural = 'Produtos da Coleção'

    def __str__(self):
        return f"{self.collection.name} - {self.product.name}"
