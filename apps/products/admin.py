from django.contrib import admin

from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'parent', 'tenant']
    list_filter = ['tenant']
    search_fields = ['name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['sku', 'name', 'category', 'base_uom', 'current_cost', 'reorder_point', 'active', 'tenant']
    list_filter = ['tenant', 'active', 'base_uom', 'track_lot', 'track_expiry']
    search_fields = ['sku', 'name', 'barcode']
