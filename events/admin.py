from django.contrib import admin

from .models import Event, EventRegistration


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "team_size", "status", "is_tournament", "tournament", "start_date")
    list_filter = ("status", "type", "is_tournament")
    search_fields = ("title", "description")
    raw_id_fields = ("created_by", "tournament")


@admin.register(EventRegistration)
class EventRegistrationAdmin(admin.ModelAdmin):
    list_display = ("event", "registration_type", "team", "user", "status", "registered_at")
    list_filter = ("registration_type", "status")
    search_fields = ("event__title", "team__name", "user__username")
    raw_id_fields = ("event", "team", "user")
