from django.contrib import admin
from .models import Batch, Handoff, SensorReading, SyncState

@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ("batch_id", "manufacturer", "content_ref", "created_at")
    search_fields = ("batch_id", "manufacturer")

@admin.register(Handoff)
class HandoffAdmin(admin.ModelAdmin):
    list_display = ("batch_id", "from_addr", "to_addr", "time")
    list_filter = ("batch_id",)
    search_fields = ("batch_id", "from_addr", "to_addr")

@admin.register(SensorReading)
class SensorReadingAdmin(admin.ModelAdmin):
    list_display = ("reading_hash", "batch_id", "signer", "time", "temp_c")
    list_filter = ("batch_id",)
    search_fields = ("reading_hash", "batch_id", "signer")

@admin.register(SyncState)
class SyncStateAdmin(admin.ModelAdmin):
    list_display = ("name", "start_block", "backfilled_through", "last_block", "updated_at")
