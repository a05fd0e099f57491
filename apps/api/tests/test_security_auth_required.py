"""
Every user-data endpoint requires a bearer token.
"""
import sys
from pathlib import Path
from uuid import uuid4

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.security import create_access_token

SOME_ID = str(uuid4())

PROTECTED = [
    ("get", "/v1/auth/me"),
    ("get", "/v1/profile"),
    ("put", "/v1/profile"),
    ("get", "/v1/workouts"),
    ("post", "/v1/workouts"),
    ("get", f"/v1/workouts/{SOME_ID}"),
    ("post", f"/v1/workouts/{SOME_ID}/complete"),
    ("delete", f"/v1/workouts/{SOME_ID}"),
    ("post", "/v1/ai/generate-program"),
    ("post", "/v1/ai/analyze-workout"),
    ("post", "/v1/ai/weekly-digest"),
    ("get", "/v1/ai/usage"),
    ("get", "/v1/programs"),
    ("get", "/v1/programs/active"),
    ("get", "/v1/programs/planned-workouts/count"),
    ("post", f"/v1/programs/{SOME_ID}/accept"),
    ("post", f"/v1/programs/{SOME_ID}/reject"),
]


@pytest.mark.parametrize("method,path", PROTECTED)
def test_missing_token_is_401(client, method, path):
    response = client.request(method.upper(), path)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


@pytest.mark.parametrize("method,path", PROTECTED[:4])
def test_token_for_unknown_user_is_401(client, method, path):
    token = create_access_token(data={"sub": str(uuid4())})
    response = client.request(method.upper(), path, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_token_without_subject_is_401(client):
    token = create_access_token(data={"email": "nobody@example.com"})
    response = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_preflight_needs_no_token(client):
    response = client.options("/v1/ai/generate-program")
    assert response.status_code == 200
    assert response.text == "ok"


def test_health_is_public(client):
    response = client.get("/health")
    assert response.status_code == 200
