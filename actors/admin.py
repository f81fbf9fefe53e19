from django.contrib import admin
from .models import Actor

@admin.register(Actor)
class ActorAdmin(admin.ModelAdmin):
    list_display = ("address", "name", "is_active", "created_at")
    search_fields = ("address", "name")
    list_filter = ("is_active",)
