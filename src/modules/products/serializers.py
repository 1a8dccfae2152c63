"""Product DRF serializers (read-only storefront API)."""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the public Product resource."""

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "price",
            "image_url",
            "category",
            "description",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
