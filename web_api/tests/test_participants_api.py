"""Tests for participant registration and gift endpoints."""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from core.participants import (
    AuthenticationError,
    CredentialMismatchError,
    DuplicateParticipantError,
    GiftSubmission,
    InvalidGiftError,
    ParticipantNotFoundError,
    PasswordMismatchError,
)
from core.queries.participants import Participant, StoreError

ALICE = Participant(participant_id=7, username="alice", email="alice@example.com")

REGISTRATION = {
    "username": "alice",
    "email": "alice@example.com",
    "password": "pw",
    "confirm_password": "pw",
}

GIFT = {
    "username": "alice",
    "email": "alice@example.com",
    "password": "pw",
    "gift": "a book",
}


class TestRegister:
    @patch("web_api.routes.participants.register_participant", new_callable=AsyncMock)
    def test_creates_participant(self, mock_register, client, ctx):
        mock_register.return_value = ALICE

        response = client.post("/api/participants", json=REGISTRATION)

        assert response.status_code == 201
        assert response.json() == {"participant_id": 7, "username": "alice"}
        mock_register.assert_awaited_once_with(
            ctx.store,
            username="alice",
            email="alice@example.com",
            password="pw",
            confirm_password="pw",
        )

    @patch("web_api.routes.participants.register_participant", new_callable=AsyncMock)
    def test_password_mismatch_is_400(self, mock_register, client):
        mock_register.side_effect = PasswordMismatchError("Passwords do not match!")

        response = client.post("/api/participants", json=REGISTRATION)

        assert response.status_code == 400
        assert response.json()["detail"] == "Passwords do not match!"

    @patch("web_api.routes.participants.register_participant", new_callable=AsyncMock)
    def test_duplicate_is_409(self, mock_register, client):
        mock_register.side_effect = DuplicateParticipantError("User already exists!")

        response = client.post("/api/participants", json=REGISTRATION)

        assert response.status_code == 409

    @patch("web_api.routes.participants.register_participant", new_callable=AsyncMock)
    def test_store_failure_is_503(self, mock_register, client):
        mock_register.side_effect = StoreError("down")

        response = client.post("/api/participants", json=REGISTRATION)

        assert response.status_code == 503

    def test_missing_fields_is_422(self, client):
        response = client.post("/api/participants", json={"username": "alice"})
        assert response.status_code == 422


class TestGift:
    @patch("web_api.routes.participants.submit_gift", new_callable=AsyncMock)
    def test_first_submission(self, mock_submit, client, ctx):
        mock_submit.return_value = GiftSubmission(participant=ALICE, first_submission=True)

        response = client.post("/api/participants/7/gift", json=GIFT)

        assert response.status_code == 200
        assert response.json() == {"status": "submitted", "first_submission": True}
        mock_submit.assert_awaited_once_with(
            ctx,
            participant_id=7,
            username="alice",
            email="alice@example.com",
            password="pw",
            gift="a book",
        )

    @patch("web_api.routes.participants.submit_gift", new_callable=AsyncMock)
    def test_resubmission(self, mock_submit, client):
        mock_submit.return_value = GiftSubmission(participant=ALICE, first_submission=False)

        response = client.post("/api/participants/7/gift", json=GIFT)

        assert response.json()["first_submission"] is False

    @patch("web_api.routes.participants.submit_gift", new_callable=AsyncMock)
    def test_unknown_participant_is_404(self, mock_submit, client):
        mock_submit.side_effect = ParticipantNotFoundError("nope")

        response = client.post("/api/participants/99/gift", json=GIFT)

        assert response.status_code == 404

    @patch("web_api.routes.participants.submit_gift", new_callable=AsyncMock)
    def test_credential_mismatch_is_400(self, mock_submit, client):
        mock_submit.side_effect = CredentialMismatchError("Username and Email didn't match!")

        response = client.post("/api/participants/7/gift", json=GIFT)

        assert response.status_code == 400
        assert response.json()["detail"] == "Username and Email didn't match!"

    @patch("web_api.routes.participants.submit_gift", new_callable=AsyncMock)
    def test_wrong_password_is_401(self, mock_submit, client):
        mock_submit.side_effect = AuthenticationError("Wrong password!")

        response = client.post(
            "/api/participants/7/gift", json={**GIFT, "password": "guess"}
        )

        assert response.status_code == 401
        assert mock_submit.await_args.kwargs["password"] == "guess"

    def test_password_is_required(self, client):
        body = {k: v for k, v in GIFT.items() if k != "password"}

        response = client.post("/api/participants/7/gift", json=body)

        assert response.status_code == 422

    @patch("web_api.routes.participants.submit_gift", new_callable=AsyncMock)
    def test_empty_gift_is_400(self, mock_submit, client):
        mock_submit.side_effect = InvalidGiftError("Gift wish can't be empty!")

        response = client.post("/api/participants/7/gift", json={**GIFT, "gift": ""})

        assert response.status_code == 400


class TestLogin:
    @patch("web_api.routes.participants.verify_credentials", new_callable=AsyncMock)
    def test_correct_password(self, mock_verify, client, ctx):
        mock_verify.return_value = ALICE

        response = client.post("/api/login", json={"username": "alice", "password": "pw"})

        assert response.status_code == 200
        assert response.json() == {
            "participant_id": 7,
            "username": "alice",
            "email": "alice@example.com",
            "has_gift": False,
        }
        mock_verify.assert_awaited_once_with(ctx.store, "alice", "pw")

    @patch("web_api.routes.participants.verify_credentials", new_callable=AsyncMock)
    def test_wrong_password_is_401(self, mock_verify, client):
        mock_verify.return_value = None

        response = client.post(
            "/api/login", json={"username": "alice", "password": "guess"}
        )

        assert response.status_code == 401


class TestStatus:
    def test_pairing_state(self, client):
        response = client.get("/api/pairing")
        assert response.json() == {"state": "scheduled"}

    def test_health(self, client):
        response = client.get("/health")
        assert response.json() == {"status": "healthy", "pairing_state": "scheduled"}

    def test_not_ready_without_context(self):
        from main import create_app

        client = TestClient(create_app())

        assert client.get("/api/pairing").status_code == 503
