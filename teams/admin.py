from django.contrib import admin

from .models import Team, TeamMember, TeamInvitation, TeamApplication


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    raw_id_fields = ("member",)


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("name", "leader", "is_tournament", "event", "tournament", "created_at")
    list_filter = ("is_tournament",)
    search_fields = ("name", "leader__username", "leader__email")
    raw_id_fields = ("leader", "event", "tournament")
    inlines = [TeamMemberInline]


@admin.register(TeamInvitation)
class TeamInvitationAdmin(admin.ModelAdmin):
    list_display = ("team", "invitee", "inviter", "status", "created_at", "expires_at")
    list_filter = ("status",)
    search_fields = ("team__name", "invitee__username", "invitee__email")
    raw_id_fields = ("team", "inviter", "invitee", "event", "tournament")
    readonly_fields = ("invitation_token", "created_at", "responded_at")


@admin.register(TeamApplication)
class TeamApplicationAdmin(admin.ModelAdmin):
    list_display = ("team", "applicant", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("team__name", "applicant__username")
    raw_id_fields = ("team", "applicant", "event", "tournament")
