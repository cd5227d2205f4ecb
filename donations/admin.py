from django.contrib import admin
from .models import FoodDonation

@admin.register(FoodDonation)
class FoodDonationAdmin(admin.ModelAdmin):
    list_display = ("id","quantity","location","created_at")
    search_fields = ("description","quantity","location")
    list_filter = ("created_at",)
    readonly_fields = ("created_at",)
