from django.contrib import admin, messages
from adminsortable2.admin import SortableAdminBase, SortableInlineAdminMixin
from simple_history.admin import SimpleHistoryAdmin

from .models import Collection, CollectionRule, CollectionProduct
from .services import CollectionService


# =============================================================================
# Inlines
# =============================================================================

class CollectionRuleInline(SortableInlineAdminMixin, admin.TabularInline):
    model = CollectionRule
    extra = 1
    fields = ['rule_type', 'operator', 'value', 'position']


class CollectionProductInline(SortableInlineAdminMixin, admin.TabularInline):
    model = CollectionProduct
    extra = 0
    autocomplete_fields = ['product']
    fields = ['product', 'is_manual', 'position']
    readonly_fields = ['is_manual']


# =============================================================================
# Model Admins
# =============================================================================

@admin.register(Collection)
class CollectionAdmin(SortableAdminBase, SimpleHistoryAdmin):
    list_display = [
        'name', 'slug', 'rule_match', 'sort_order', 'rule_count',
        'product_count', 'active', 'needs_regeneration', 'last_regenerated_at'
    ]
    list_filter = ['active', 'rule_match', 'sort_order', 'needs_regeneration']
    search_fields = ['name', 'slug', 'description']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = [
        'needs_regeneration', 'regeneration_requested_at',
        'last_regenerated_at', 'created_at', 'updated_at'
    ]
    inlines = [CollectionRuleInline, CollectionProductInline]

    fieldsets = (
        (None, {
            'fields': ('name', 'slug', 'description', 'image', 'active')
        }),
        ('Regras', {
            'fields': ('rule_match', 'sort_order')
        }),
        ('SEO', {
            'fields': ('seo_title', 'seo_description'),
            'classes': ('collapse',)
        }),
        ('Regeneração', {
            'fields': (
                'needs_regeneration', 'regeneration_requested_at',
                'last_regenerated_at', 'created_at', 'updated_at'
            ),
            'classes': ('collapse',)
        }),
    )

    actions = ['regenerate_collections', 'mark_for_regeneration']

    def rule_count(self, obj):
        return obj.rules.count()
    rule_count.short_description = 'Regras'

    def product_count(self, obj):
        return obj.memberships.count()
    product_count.short_description = 'Produtos'

    def save_formset(self, request, form, formset, change):
        instances = formset.save(commit=False)
        for instance in instances:
            # Rows added by hand in the admin are manual memberships
            if isinstance(instance, CollectionProduct) and instance.pk is None:
                instance.is_manual = True
            instance.save()
        for obj in formset.deleted_objects:
            obj.delete()
        formset.save_m2m()

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        CollectionService.regenerate(form.instance.pk)

    @admin.action(description='Regenerar coleções selecionadas')
    def regenerate_collections(self, request, queryset):
        for collection in queryset:
            result = CollectionService.regenerate(collection.pk)
            self.message_user(
                request,
                f'{collection.name}: {result.matched} produtos encontrados, '
                f'{result.added} adicionados, {result.removed} removidos.'
            )

    @admin.action(description='Marcar para regeneração')
    def mark_for_regeneration(self, request, queryset):
        count = CollectionService.mark_for_regeneration(queryset)
        self.message_user(request, f'{count} coleções marcadas para regeneração.', messages.INFO)
