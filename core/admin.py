from django.contrib import admin
from .models import DomainActivity


@admin.register(DomainActivity)
class DomainActivityAdmin(admin.ModelAdmin):
    list_display = ('verb', 'actor', 'content_type', 'object_id', 'visibility', 'timestamp')
    list_filter = ('verb', 'visibility')
    search_fields = ('actor__username', 'verb')
    readonly_fields = ('actor', 'verb', 'content_type', 'object_id', 'metadata', 'timestamp')
