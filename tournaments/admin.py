from django.contrib import admin

from .models import Tournament, TournamentRegistration, TournamentPoints


@admin.register(Tournament)
class TournamentAdmin(admin.ModelAdmin):
    list_display = ("title", "year", "team_size", "status", "start_date")
    list_filter = ("status", "year")
    search_fields = ("title",)


@admin.register(TournamentRegistration)
class TournamentRegistrationAdmin(admin.ModelAdmin):
    list_display = ("tournament", "team", "status", "registered_at")
    list_filter = ("status",)
    raw_id_fields = ("tournament", "team")


@admin.register(TournamentPoints)
class TournamentPointsAdmin(admin.ModelAdmin):
    list_display = ("tournament", "team", "points", "matches_played", "wins", "losses", "draws")
    ordering = ("tournament", "-points")
    raw_id_fields = ("tournament", "team")
