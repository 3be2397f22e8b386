from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from core.results import ErrorCode
from events import services
from events.models import Event, EventRegistration
from teams import services as team_services
from teams.models import Team, TeamInvitation, TeamMember
from tournaments.models import Tournament, TournamentRegistration
from users.models import User


class EventRegistrationsOverviewTestCase(TestCase):
    def setUp(self):
        self.core = User.objects.create_user(username="organizer", password="pass", role=User.ROLE_CORE)
        self.leader = User.objects.create_user(username="leader", password="pass")
        self.alice = User.objects.create_user(username="alice", password="pass")
        self.bob = User.objects.create_user(username="bob", password="pass")
        self.solo = User.objects.create_user(username="solo", password="pass")

        self.event = Event.objects.create(
            title="Hack Night",
            type=Event.TYPE_TEAM,
            team_size=2,
            status=Event.STATUS_REGISTRATION_OPEN,
        )

    def test_partitions_complete_and_incomplete_teams(self):
        full = team_services.create_team(self.leader, self.event.id, "Full", [self.alice.id]).data["team_id"]
        invitation = TeamInvitation.objects.get(team_id=full, invitee=self.alice)
        team_services.respond_to_invitation(invitation.id, True, self.alice)
        forming = team_services.create_team(self.bob, self.event.id, "Forming", [self.solo.id]).data["team_id"]

        result = services.get_event_registrations(self.event.id, self.core)

        self.assertTrue(result.success, result.message)
        data = result.data
        self.assertEqual([t["id"] for t in data["complete_teams"]], [full])
        self.assertEqual([t["id"] for t in data["incomplete_teams"]], [forming])
        self.assertTrue(data["incomplete_teams"][0]["has_pending_invitations"])
        self.assertEqual(len(data["incomplete_teams"][0]["pending_invitations"]), 1)
        self.assertEqual(data["individual_registrations"], [])
        self.assertEqual(data["tournament_pending"], [])
        self.assertEqual(data["undersized_teams"], [])

    def test_registered_team_below_raised_size_stays_visible(self):
        team_id = team_services.create_team(self.leader, self.event.id, "Full", [self.alice.id]).data["team_id"]
        invitation = TeamInvitation.objects.get(team_id=team_id, invitee=self.alice)
        team_services.respond_to_invitation(invitation.id, True, self.alice)
        self.event.team_size = 3
        self.event.save(update_fields=["team_size"])

        data = services.get_event_registrations(self.event.id, self.core).data

        self.assertEqual(data["complete_teams"], [])
        self.assertEqual(data["incomplete_teams"], [])
        self.assertEqual([t["id"] for t in data["undersized_teams"]], [team_id])

    def test_incomplete_team_without_invitations(self):
        team_services.create_team(self.bob, self.event.id, "Lonely", [])

        data = services.get_event_registrations(self.event.id, self.core).data

        self.assertFalse(data["incomplete_teams"][0]["has_pending_invitations"])

    def test_tournament_pending_lists_unregistered_tournament_teams(self):
        tournament = Tournament.objects.create(
            title="Spring Cup", team_size=1, status=Tournament.STATUS_REGISTRATION_OPEN
        )
        event = Event.objects.create(
            title="Cup Round 1",
            type=Event.TYPE_TEAM,
            team_size=1,
            is_tournament=True,
            tournament=tournament,
            status=Event.STATUS_REGISTRATION_OPEN,
        )
        signed_up = team_services.create_tournament_team(self.leader, tournament.id, "Falcons", []).data["team_id"]
        waiting = team_services.create_tournament_team(self.bob, tournament.id, "Hawks", []).data["team_id"]
        # Forming tournament teams are not pending for events
        Team.objects.create(name="Owls", leader=self.alice, tournament=tournament, is_tournament=True)

        services.register_existing_tournament_team(event.id, signed_up, self.leader)
        data = services.get_event_registrations(event.id, self.core).data

        self.assertEqual([t["id"] for t in data["complete_teams"]], [signed_up])
        self.assertEqual([t["id"] for t in data["tournament_pending"]], [waiting])

    def test_individual_registrations(self):
        event = Event.objects.create(
            title="Talk", type=Event.TYPE_INDIVIDUAL, team_size=1, status=Event.STATUS_REGISTRATION_OPEN
        )
        services.register_for_individual_event(event.id, self.solo)

        data = services.get_event_registrations(event.id, self.core).data

        self.assertEqual(len(data["individual_registrations"]), 1)
        self.assertEqual(data["individual_registrations"][0]["user"]["id"], self.solo.id)

    def test_members_cannot_view_overview(self):
        result = services.get_event_registrations(self.event.id, self.leader)

        self.assertEqual(result.error_code, ErrorCode.FORBIDDEN)

    def test_unknown_event(self):
        result = services.get_event_registrations(999999, self.core)

        self.assertEqual(result.error_code, ErrorCode.NOT_FOUND)


class IndividualRegistrationTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="solo", password="pass")
        self.other = User.objects.create_user(username="other", password="pass")
        self.event = Event.objects.create(
            title="Talk",
            type=Event.TYPE_INDIVIDUAL,
            team_size=1,
            max_participants=1,
            status=Event.STATUS_REGISTRATION_OPEN,
        )

    def test_register_once(self):
        first = services.register_for_individual_event(self.event.id, self.user)
        second = services.register_for_individual_event(self.event.id, self.user)

        self.assertTrue(first.success, first.message)
        self.assertEqual(second.error_code, ErrorCode.CONFLICT)
        self.assertEqual(EventRegistration.objects.filter(event=self.event, user=self.user).count(), 1)

    def test_capacity_is_enforced(self):
        services.register_for_individual_event(self.event.id, self.user)

        result = services.register_for_individual_event(self.event.id, self.other)

        self.assertEqual(result.message, "Event is full")

    def test_deadline_passed(self):
        self.event.registration_deadline = timezone.now() - timedelta(hours=1)
        self.event.save()

        result = services.register_for_individual_event(self.event.id, self.user)

        self.assertEqual(result.message, "Registration deadline passed")

    def test_team_event_is_rejected(self):
        self.event.type = Event.TYPE_TEAM
        self.event.save()

        result = services.register_for_individual_event(self.event.id, self.user)

        self.assertEqual(result.error_code, ErrorCode.VALIDATION)

    def test_is_user_registered(self):
        before = services.is_user_registered(self.event.id, self.user)
        services.register_for_individual_event(self.event.id, self.user)
        after = services.is_user_registered(self.event.id, self.user)

        self.assertFalse(before.data["registered"])
        self.assertTrue(after.data["registered"])
        self.assertFalse(after.data["in_team"])


class TournamentTeamEventRegistrationTestCase(TestCase):
    def setUp(self):
        self.leader = User.objects.create_user(username="leader", password="pass")
        self.mate = User.objects.create_user(username="mate", password="pass")
        self.stranger = User.objects.create_user(username="stranger", password="pass")
        self.tournament = Tournament.objects.create(
            title="Spring Cup", team_size=2, status=Tournament.STATUS_REGISTRATION_OPEN
        )
        self.event = Event.objects.create(
            title="Cup Round 1",
            type=Event.TYPE_TEAM,
            team_size=2,
            is_tournament=True,
            tournament=self.tournament,
            status=Event.STATUS_REGISTRATION_OPEN,
        )
        self.team = Team.objects.create(
            name="Falcons", leader=self.leader, tournament=self.tournament, is_tournament=True
        )
        TeamMember.objects.create(team=self.team, member=self.leader)
        TeamMember.objects.create(team=self.team, member=self.mate)
        TournamentRegistration.objects.create(tournament=self.tournament, team=self.team)

    def test_member_registers_team_once(self):
        first = services.register_existing_tournament_team(self.event.id, self.team.id, self.mate)
        second = services.register_existing_tournament_team(self.event.id, self.team.id, self.leader)

        self.assertEqual(first.message, "Tournament team registered successfully")
        self.assertEqual(second.error_code, ErrorCode.CONFLICT)
        self.assertEqual(EventRegistration.objects.filter(event=self.event, team=self.team).count(), 1)

    def test_non_member_cannot_register_team(self):
        result = services.register_existing_tournament_team(self.event.id, self.team.id, self.stranger)

        self.assertEqual(result.error_code, ErrorCode.FORBIDDEN)

    def test_non_tournament_event_is_rejected(self):
        plain = Event.objects.create(title="Plain", team_size=2, status=Event.STATUS_REGISTRATION_OPEN)

        result = services.register_existing_tournament_team(plain.id, self.team.id, self.leader)

        self.assertEqual(result.message, "Event is not a tournament event")

    def test_your_registered_team(self):
        missing = services.get_your_registered_team(self.event.id, self.mate)
        services.register_existing_tournament_team(self.event.id, self.team.id, self.mate)
        found = services.get_your_registered_team(self.event.id, self.mate)

        self.assertEqual(missing.message, "Registration not found")
        self.assertEqual(found.data["team"]["id"], self.team.id)
        self.assertEqual(found.data["team"]["member_count"], 2)

    def test_is_user_registered_through_team(self):
        services.register_existing_tournament_team(self.event.id, self.team.id, self.mate)

        result = services.is_user_registered(self.event.id, self.leader)

        self.assertTrue(result.data["registered"])
        self.assertEqual(result.data["team_id"], self.team.id)


class EventStatusTestCase(TestCase):
    def setUp(self):
        self.core = User.objects.create_user(username="organizer", password="pass", role=User.ROLE_CORE)
        self.member = User.objects.create_user(username="member", password="pass")
        self.event = Event.objects.create(title="Hack Night", team_size=3)

    def test_valid_transition(self):
        result = services.update_event_status(self.event.id, Event.STATUS_REGISTRATION_OPEN, self.core)

        self.assertTrue(result.success, result.message)
        self.event.refresh_from_db()
        self.assertEqual(self.event.status, Event.STATUS_REGISTRATION_OPEN)

    def test_invalid_transition(self):
        result = services.update_event_status(self.event.id, Event.STATUS_COMPLETED, self.core)

        self.assertEqual(result.error_code, ErrorCode.VALIDATION)
        self.event.refresh_from_db()
        self.assertEqual(self.event.status, Event.STATUS_UPCOMING)

    def test_members_cannot_change_status(self):
        result = services.update_event_status(self.event.id, Event.STATUS_REGISTRATION_OPEN, self.member)

        self.assertEqual(result.error_code, ErrorCode.FORBIDDEN)


class EventApiTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.core = User.objects.create_user(username="organizer", password="pass", role=User.ROLE_CORE)
        self.member = User.objects.create_user(username="member", password="pass")

    def test_core_creates_event(self):
        self.client.force_authenticate(user=self.core)

        resp = self.client.post(
            "/api/events/",
            {"title": "Hack Night", "type": "team", "team_size": 3},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        event = Event.objects.get(pk=resp.json()["id"])
        self.assertEqual(event.created_by, self.core)
        self.assertEqual(event.status, Event.STATUS_UPCOMING)

    def test_member_cannot_create_event(self):
        self.client.force_authenticate(user=self.member)

        resp = self.client.post("/api/events/", {"title": "Nope", "team_size": 2}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_registrations_overview_requires_core(self):
        event = Event.objects.create(title="Hack Night", team_size=2)
        self.client.force_authenticate(user=self.member)

        denied = self.client.get(f"/api/events/{event.id}/registrations/")
        self.client.force_authenticate(user=self.core)
        allowed = self.client.get(f"/api/events/{event.id}/registrations/")

        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(allowed.status_code, status.HTTP_200_OK)
        self.assertIn("complete_teams", allowed.json()["data"])

    def test_status_endpoint(self):
        event = Event.objects.create(title="Hack Night", team_size=2)
        self.client.force_authenticate(user=self.core)

        resp = self.client.post(f"/api/events/{event.id}/status/", {"status": "registration_open"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        self.assertEqual(resp.json()["data"]["status"], "registration_open")

    def test_individual_register_endpoint(self):
        event = Event.objects.create(
            title="Talk", type=Event.TYPE_INDIVIDUAL, team_size=1, status=Event.STATUS_REGISTRATION_OPEN
        )
        self.client.force_authenticate(user=self.member)

        first = self.client.post(f"/api/events/{event.id}/register/")
        second = self.client.post(f"/api/events/{event.id}/register/")

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
