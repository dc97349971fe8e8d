"""
Tests for the HTTP layer. Persistence calls are patched out; no database needed.
"""

import uuid
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from gehl.db import get_db
from gehl.errors import NotFoundError, UnknownFieldError, UnsupportedFieldSelectionError
from gehl.main import app

SURVEY_ID = "22222222-2222-2222-2222-222222222222"
DATA_POINT_ID = "33333333-3333-3333-3333-333333333333"


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = lambda: MagicMock()
    # startup (init_db) only runs when the client is used as a context manager
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


class TestDataPointRoutes:

    def test_save(self, client):
        with patch("gehl.services.persistence.datapoints.insert_or_update_data_point", return_value=1) as m:
            res = client.post(f"/surveys/{SURVEY_ID}/datapoints",
                              json={"data_point_id": DATA_POINT_ID, "gender": "male"})
        assert res.status_code == 200
        assert res.json()["data_point_id"] == DATA_POINT_ID
        assert m.call_args.args[1] == uuid.UUID(SURVEY_ID)

    def test_unknown_field_is_400(self, client):
        with patch("gehl.services.persistence.datapoints.insert_or_update_data_point",
                   side_effect=UnknownFieldError("colour")):
            res = client.post(f"/surveys/{SURVEY_ID}/datapoints",
                              json={"data_point_id": DATA_POINT_ID, "colour": "red"})
        assert res.status_code == 400
        assert "colour" in res.json()["detail"]

    def test_delete_missing_is_404(self, client):
        with patch("gehl.services.persistence.datapoints.delete_data_point",
                   side_effect=NotFoundError("No data point found to delete")):
            res = client.delete(f"/surveys/{SURVEY_ID}/datapoints/{DATA_POINT_ID}")
        assert res.status_code == 404

    def test_list(self, client):
        rows = [{"data_point_id": DATA_POINT_ID, "location": {"type": "Point", "coordinates": [1.0, 2.0]}}]
        with patch("gehl.services.persistence.datapoints.list_data_points", return_value=rows):
            res = client.get(f"/surveys/{SURVEY_ID}/datapoints")
        assert res.json() == rows


class TestStudyRoutes:

    def test_unsupported_fields_is_400(self, client):
        with patch("gehl.services.persistence.studies.create_study",
                   side_effect=UnsupportedFieldSelectionError(["gender"])):
            res = client.post("/studies", json={"user_id": str(uuid.uuid4()), "fields": ["gender"]})
        assert res.status_code == 400

    def test_invalid_study_type_rejected_by_schema(self, client):
        res = client.post("/studies", json={"user_id": str(uuid.uuid4()), "fields": [], "type": "census"})
        assert res.status_code == 422


class TestSignup:

    @pytest.mark.parametrize("password,confirmation", [
        ("short!", "short!"),
        ("longenough", "longenough"),
        ("longenough!", "different!"),
    ])
    def test_rejected_passwords(self, client, password, confirmation):
        res = client.post("/users/signup", json={
            "email": "a@b.org", "password": password, "password_confirmation": confirmation})
        assert res.status_code == 422

    def test_bad_email(self, client):
        res = client.post("/users/signup", json={
            "email": "nobody", "password": "longenough!", "password_confirmation": "longenough!"})
        assert res.status_code == 422


class TestLogin:

    def test_login(self, client):
        user = MagicMock(user_id=uuid.uuid4(), email="a@b.org")
        user.name = "Ada"
        with patch("gehl.services.persistence.users.authenticate_user", return_value=user) as m:
            res = client.post("/users/login", json={"email": "a@b.org", "password": "secret!pw"})
        assert res.status_code == 200
        assert res.json()["user_id"] == str(user.user_id)
        assert m.call_args.args[1:] == ("a@b.org", "secret!pw")

    def test_wrong_password_is_401(self, client):
        with patch("gehl.services.persistence.users.authenticate_user", return_value=None):
            res = client.post("/users/login", json={"email": "a@b.org", "password": "wrong!pw"})
        assert res.status_code == 401

    def test_unknown_email_is_401(self, client):
        with patch("gehl.services.persistence.users.authenticate_user",
                   side_effect=NotFoundError("User not found for email: x@b.org")):
            res = client.post("/users/login", json={"email": "x@b.org", "password": "secret!pw"})
        assert res.status_code == 401

    def test_get_user(self, client):
        user = MagicMock(user_id=uuid.uuid4(), email="a@b.org")
        user.name = None
        with patch("gehl.services.persistence.users.find_user_by_id", return_value=user):
            res = client.get(f"/users/{user.user_id}")
        assert res.json() == {"user_id": str(user.user_id), "email": "a@b.org", "name": None}

    def test_get_missing_user_is_404(self, client):
        with patch("gehl.services.persistence.users.find_user_by_id", side_effect=NotFoundError("User not found")):
            res = client.get(f"/users/{uuid.uuid4()}")
        assert res.status_code == 404
