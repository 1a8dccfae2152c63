from django.contrib import admin

from modules.products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "price", "category", "updated_at"]
    list_filter = ["category"]
    search_fields = ["name", "description"]
