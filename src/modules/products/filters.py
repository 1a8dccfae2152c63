"""Catalogue filters for ``GET /api/products/``.

``?category=Pijamas`` (case-insensitive), ``?search=longo`` (name or
description), ``?min_price=`` / ``?max_price=`` and ``?ids=1,2,3`` (the
storefront refreshes a saved cart with it).
"""

import django_filters
from django.db.models import Q

from modules.products.models import Product


class NumberInFilter(django_filters.BaseInFilter, django_filters.NumberFilter):
    pass


class ProductFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    search = django_filters.CharFilter(method="filter_search")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    ids = NumberInFilter(field_name="id", lookup_expr="in")

    class Meta:
        model = Product
        fields = ["category", "search", "min_price", "max_price", "ids"]

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(name__icontains=value) | Q(description__icontains=value))
