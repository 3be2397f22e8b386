from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from events.models import Event, EventRegistration
from teams.models import Team, TeamApplication, TeamInvitation
from tournaments.models import Tournament
from users.models import User


class TeamApiTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.leader = User.objects.create_user(username="leader", password="pass")
        self.alice = User.objects.create_user(username="alice", password="pass")
        self.bob = User.objects.create_user(username="bob", password="pass")

        self.event = Event.objects.create(
            title="Hack Night",
            type=Event.TYPE_TEAM,
            team_size=3,
            status=Event.STATUS_REGISTRATION_OPEN,
        )

    def auth(self, user):
        self.client.force_authenticate(user=user)

    def create_team(self, name="Alpha", invited=None):
        self.auth(self.leader)
        return self.client.post(
            "/api/teams/",
            {"event": self.event.id, "name": name, "invited_member_ids": invited or []},
            format="json",
        )

    def test_requires_authentication(self):
        resp = self.client.post("/api/teams/", {"event": self.event.id, "name": "Alpha"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_team(self):
        resp = self.create_team(invited=[self.alice.id, self.bob.id])

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Team created and invitations sent")
        self.assertTrue(Team.objects.filter(pk=body["data"]["team_id"]).exists())

    def test_create_team_too_many_members(self):
        resp = self.create_team(invited=[self.alice.id, self.bob.id, self.leader.id + 100])

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        body = resp.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"], "Too many members for team size")
        self.assertEqual(body["code"], "validation")

    def test_duplicate_name_is_conflict(self):
        self.create_team()
        resp = self.create_team()

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.json()["code"], "duplicate_name")

    def test_missing_fields_use_error_envelope(self):
        self.auth(self.leader)
        resp = self.client.post("/api/teams/", {"name": "Alpha"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        body = resp.json()
        self.assertFalse(body["success"])
        self.assertIn("event", body["errors"])

    def test_invitation_flow_registers_team(self):
        team_id = self.create_team(invited=[self.alice.id, self.bob.id]).json()["data"]["team_id"]

        for user in (self.alice, self.bob):
            invitation = TeamInvitation.objects.get(team_id=team_id, invitee=user)
            self.auth(user)
            resp = self.client.post(
                f"/api/teams/invitations/{invitation.id}/respond/", {"accept": True}, format="json"
            )
            self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)

        self.assertEqual(resp.json()["message"], "Invitation accepted")
        self.assertTrue(resp.json()["data"]["registered"])
        self.assertEqual(EventRegistration.objects.filter(team_id=team_id).count(), 1)

        self.auth(self.leader)
        detail = self.client.get(f"/api/teams/{team_id}/")
        self.assertEqual(detail.json()["data"]["state"], "registered")
        self.assertEqual(detail.json()["data"]["member_count"], 3)

    def test_respond_twice_is_conflict(self):
        team_id = self.create_team(invited=[self.alice.id]).json()["data"]["team_id"]
        invitation = TeamInvitation.objects.get(team_id=team_id, invitee=self.alice)
        self.auth(self.alice)
        url = f"/api/teams/invitations/{invitation.id}/respond/"

        self.client.post(url, {"accept": False}, format="json")
        resp = self.client.post(url, {"accept": True}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

    def test_my_invitations(self):
        self.create_team(invited=[self.alice.id])
        self.auth(self.alice)

        resp = self.client.get("/api/teams/invitations/?status=pending")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.json()["data"]), 1)

    def test_apply_and_leader_accepts(self):
        team_id = self.create_team().json()["data"]["team_id"]
        self.auth(self.alice)
        resp = self.client.post(f"/api/teams/{team_id}/apply/", {"event": self.event.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        application_id = resp.json()["data"]["application_id"]

        # Applicant cannot accept their own application
        resp = self.client.post(
            f"/api/teams/applications/{application_id}/respond/", {"accept": True}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        self.auth(self.leader)
        incoming = self.client.get("/api/teams/applications/incoming/")
        self.assertEqual([a["id"] for a in incoming.json()["data"]], [application_id])

        resp = self.client.post(
            f"/api/teams/applications/{application_id}/respond/", {"accept": True}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(
            TeamApplication.objects.get(pk=application_id).status,
            TeamApplication.STATUS_ACCEPTED,
        )

    def test_withdraw_application(self):
        team_id = self.create_team().json()["data"]["team_id"]
        self.auth(self.alice)
        application_id = self.client.post(f"/api/teams/{team_id}/apply/", {}, format="json").json()["data"][
            "application_id"
        ]

        resp = self.client.delete(f"/api/teams/applications/{application_id}/")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(TeamApplication.objects.exists())

    def test_needing_members_requires_scope(self):
        self.auth(self.alice)

        resp = self.client.get("/api/teams/needing-members/")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_needing_members(self):
        team_id = self.create_team().json()["data"]["team_id"]
        self.auth(self.alice)

        resp = self.client.get(f"/api/teams/needing-members/?event={self.event.id}")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([t["id"] for t in resp.json()["data"]["teams"]], [team_id])

    def test_leader_endpoints_are_forbidden_to_others(self):
        team_id = self.create_team().json()["data"]["team_id"]
        self.auth(self.alice)

        invite = self.client.post(f"/api/teams/{team_id}/invite/", {"member_id": self.bob.id}, format="json")
        members = self.client.get(f"/api/teams/{team_id}/available-members/")

        self.assertEqual(invite.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(members.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_tournament_team(self):
        tournament = Tournament.objects.create(
            title="Spring Cup", team_size=4, status=Tournament.STATUS_REGISTRATION_OPEN
        )
        self.auth(self.leader)

        resp = self.client.post(
            "/api/teams/tournament/",
            {"tournament": tournament.id, "name": "Falcons", "invited_member_ids": [self.alice.id]},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        team = Team.objects.get(pk=resp.json()["data"]["team_id"])
        self.assertTrue(team.is_tournament)
        self.assertEqual(team.tournament, tournament)

    def test_unknown_team_is_404(self):
        self.auth(self.alice)
        resp = self.client.get("/api/teams/999999/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
