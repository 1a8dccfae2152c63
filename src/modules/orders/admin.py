from django.contrib import admin

from modules.orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ["product", "quantity", "size", "unit_price", "subtotal"]
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ["id", "customer_name", "customer_email", "total_amount", "created_at"]
    search_fields = ["id", "customer_name", "customer_email"]
    date_hierarchy = "created_at"
    inlines = [OrderItemInline]
