# teams/urls.py

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import ApplicationViewSet, InvitationViewSet, TeamViewSet

router = SimpleRouter()
# Fixed prefixes are registered before the team detail routes
router.register(r'invitations', InvitationViewSet, basename='team-invitation')
router.register(r'applications', ApplicationViewSet, basename='team-application')
router.register(r'', TeamViewSet, basename='team')

urlpatterns = [
    path('', include(router.urls)),
]
