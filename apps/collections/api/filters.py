from django_filters import rest_framework as filters
from apps.collections.models import Collection, CollectionRule


class CollectionFilter(filters.FilterSet):
    """Filter for collections."""

    automatic = filters.BooleanFilter(method='filter_automatic')
    product = filters.NumberFilter(field_name='memberships__product')

    class Meta:
        model = Collection
        fields = ['active', 'rule_match', 'sort_order', 'needs_regeneration', 'product']

    def filter_automatic(self, queryset, name, value):
        with_rules = CollectionRule.objects.values('collection_id')
        if value is True:
            return queryset.filter(pk__in=with_rules)
        elif value is False:
            return queryset.exclude(pk__in=with_rules)
        return queryset
