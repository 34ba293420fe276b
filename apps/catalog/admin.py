from django.contrib import admin
from django.utils.html import format_html
from import_export import resources, fields
from import_export.admin import ImportExportModelAdmin
from import_export.widgets import ForeignKeyWidget, ManyToManyWidget
from adminsortable2.admin import SortableAdminMixin
from simple_history.admin import SimpleHistoryAdmin

from .models import (
    Category,
    Vendor,
    ProductTag,
    Product,
    Variant,
    Inventory,
    InventoryTracking,
)


# =============================================================================
# Import/Export Resources
# =============================================================================

class ProductResource(resources.ModelResource):
    """Resource for importing/exporting products."""

    category_name = fields.Field(
        column_name='category',
        attribute='category',
        widget=ForeignKeyWidget(Category, 'name')
    )
    vendor_name = fields.Field(
        column_name='vendor',
        attribute='vendor',
        widget=ForeignKeyWidget(Vendor, 'name')
    )
    tag_slugs = fields.Field(
        column_name='tags',
        attribute='tags',
        widget=ManyToManyWidget(ProductTag, field='slug', separator='|')
    )

    class Meta:
        model = Product
        import_id_fields = ['slug']
        fields = (
            'slug', 'name', 'description', 'status', 'price',
            'compare_at_price', 'category_name', 'vendor_name', 'tag_slugs'
        )
        export_order = fields


class VariantResource(resources.ModelResource):
    """Resource for importing/exporting variants."""

    product_slug = fields.Field(
        column_name='product',
        attribute='product',
        widget=ForeignKeyWidget(Product, 'slug')
    )

    class Meta:
        model = Variant
        import_id_fields = ['sku']
        fields = ('sku', 'product_slug', 'name', 'price', 'position', 'is_default')
        export_order = fields


# =============================================================================
# Inlines
# =============================================================================

class VariantInline(admin.TabularInline):
    model = Variant
    extra = 0
    fields = ['sku', 'name', 'price', 'is_default', 'available']
    readonly_fields = ['available']
    show_change_link = True


class InventoryInline(admin.StackedInline):
    model = Inventory
    can_delete = False
    fields = ['on_hand', 'available', 'reserved', 'committed']


# =============================================================================
# Model Admins
# =============================================================================

@admin.register(Category)
class CategoryAdmin(SortableAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'parent', 'product_count', 'is_active', 'display_order']
    list_filter = ['is_active', 'parent']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    autocomplete_fields = ['parent']

    def product_count(self, obj):
        return obj.products.count()
    product_count.short_description = 'Produtos'


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'website', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'email']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(ProductTag)
class ProductTagAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Product)
class ProductAdmin(ImportExportModelAdmin, SimpleHistoryAdmin):
    resource_class = ProductResource
    list_display = [
        'name', 'status_badge', 'price', 'compare_at_price',
        'category', 'vendor', 'total_inventory', 'created_at'
    ]
    list_filter = ['status', 'category', 'vendor', 'tags', 'created_at']
    search_fields = ['name', 'slug', 'description']
    prepopulated_fields = {'slug': ('name',)}
    autocomplete_fields = ['category', 'vendor']
    filter_horizontal = ['tags']
    readonly_fields = ['total_inventory', 'created_at', 'updated_at']
    inlines = [VariantInline]
    list_per_page = 50

    fieldsets = (
        (None, {
            'fields': ('name', 'slug', 'description', 'status')
        }),
        ('Preços', {
            'fields': ('price', 'compare_at_price')
        }),
        ('Organização', {
            'fields': ('category', 'vendor', 'tags')
        }),
        ('Informações', {
            'fields': ('total_inventory', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['activate_products', 'archive_products']

    def status_badge(self, obj):
        colors = {
            Product.STATUS_ACTIVE: 'green',
            Product.STATUS_DRAFT: 'orange',
            Product.STATUS_ARCHIVED: 'gray',
        }
        return format_html(
            '<span style="color: {};">{}</span>',
            colors.get(obj.status, 'black'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def _set_status(self, queryset, new_status):
        # Saved one by one so history and collection signals fire
        count = 0
        for product in queryset.exclude(status=new_status):
            product.status = new_status
            product.save()
            count += 1
        return count

    @admin.action(description='Ativar produtos selecionados')
    def activate_products(self, request, queryset):
        count = self._set_status(queryset, Product.STATUS_ACTIVE)
        self.message_user(request, f'{count} produtos ativados.')

    @admin.action(description='Arquivar produtos selecionados')
    def archive_products(self, request, queryset):
        count = self._set_status(queryset, Product.STATUS_ARCHIVED)
        self.message_user(request, f'{count} produtos arquivados.')


@admin.register(Variant)
class VariantAdmin(ImportExportModelAdmin):
    resource_class = VariantResource
    list_display = ['sku', 'name', 'product', 'effective_price', 'is_default', 'stock_status']
    list_filter = ['is_default', 'product__status']
    search_fields = ['sku', 'name', 'product__name']
    autocomplete_fields = ['product']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [InventoryInline]
    list_per_page = 50

    def stock_status(self, obj):
        if obj.available <= 0:
            return format_html('<span style="color: red;">{}</span>', 'Sem estoque')
        return format_html('<span style="color: green;">{} disponíveis</span>', obj.available)
    stock_status.short_description = 'Status Estoque'


@admin.register(InventoryTracking)
class InventoryTrackingAdmin(admin.ModelAdmin):
    list_display = [
        'variant', 'type', 'quantity', 'previous_available',
        'new_available', 'user', 'created_at'
    ]
    list_filter = ['type', 'created_at']
    search_fields = ['variant__sku', 'product__name', 'reason']
    readonly_fields = [
        'variant', 'product', 'type', 'quantity', 'previous_available',
        'new_available', 'previous_reserved', 'new_reserved', 'reason',
        'user', 'created_at'
    ]
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================================
# Admin Site Configuration
# =============================================================================

admin.site.site_header = 'Storefront Admin'
admin.site.site_title = 'Storefront'
admin.site.index_title = 'Painel de Administração'
