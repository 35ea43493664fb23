"""
Tests for framing/api/turns.py

Covers POST /api/tutor and POST /api/export through the FastAPI app, with
the orchestrator dependency overridden to a deterministic instance.
"""

import base64

from unittest.mock import AsyncMock, Mock

from framing.api.turns import get_orchestrator
from main import app


def post_turn(client, message, state=None, **extra):
    body = {"message": message, **extra}
    if state is not None:
        body["state"] = state
    return client.post("/api/tutor", json=body)


# ===========================================================================
# POST /api/tutor
# ===========================================================================

class TestTutorEndpoint:

    def test_first_turn(self, client):
        resp = post_turn(client, "The Water Cycle")
        assert resp.status_code == 200
        data = resp.json()
        assert "The Water Cycle" in data["reply"]
        assert data["state"]["frame"]["keyTopic"] == "The Water Cycle"
        assert data["state"]["turnCount"] == 1
        assert data["flagged"] is False
        assert data["safetyMode"] is False
        assert data["exports"] is None

    def test_state_round_trip(self, client):
        first = post_turn(client, "The Cuban Missile Crisis is about how the US and USSR almost went to nuclear war in 1962")
        state = first.json()["state"]
        assert state["pending"] == {"kind": "confirmIsAbout"}

        second = post_turn(client, "yes", state)
        data = second.json()
        assert data["state"]["pending"] is None
        assert "isAbout" in data["state"]["confirmed"]
        assert "The Cuban Missile Crisis" in data["reply"]

    def test_intake(self, client):
        resp = post_turn(client, "The Water Cycle", intake={"subject": "Science", "grade": 6})
        assert resp.json()["state"]["intake"] == {"subject": "Science", "task": None, "grade": 6}

    def test_empty_message_is_400(self, client):
        resp = post_turn(client, "   ")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing 'message' in request body"

    def test_missing_message_is_400(self, client):
        resp = client.post("/api/tutor", json={})
        assert resp.status_code == 400

    def test_safety_flag(self, client):
        resp = post_turn(client, "I hate you")
        data = resp.json()
        assert data["flagged"] is True
        assert data["flagCategory"] == "BULLYING"
        assert data["severity"] == "B"
        assert data["safetyMode"] is True
        assert data["state"]["frame"]["keyTopic"] == ""

    def test_unexpected_error_is_500(self, client):
        broken = Mock()
        broken.process_turn = AsyncMock(side_effect=RuntimeError("boom"))
        app.dependency_overrides[get_orchestrator] = lambda: broken

        resp = post_turn(client, "The Water Cycle")
        assert resp.status_code == 500
        assert resp.json()["detail"] == {"message": "Server error", "type": "RuntimeError"}

    def test_export_attached_when_chosen(self, client, complete_frame_state):
        complete_frame_state["pending"] = {"kind": "chooseExportType"}
        complete_frame_state["exportOffered"] = True

        resp = post_turn(client, "1", complete_frame_state)
        data = resp.json()
        assert data["state"]["exportIntent"] == "text"
        assert data["exports"]["exportIntent"] == "text"
        assert data["exports"]["frameText"].startswith("Key Topic: The Cuban Missile Crisis")


# ===========================================================================
# POST /api/export
# ===========================================================================

class TestExportEndpoint:

    def test_complete_frame(self, client, complete_frame_state):
        resp = client.post("/api/export", json={"state": complete_frame_state, "exportIntent": "print"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["exportIntent"] == "print"
        assert data["documentMimeType"] == "application/pdf"
        assert base64.b64decode(data["renderedDocument"]).startswith(b"%PDF")

    def test_incomplete_frame_is_409(self, client, complete_frame_state):
        complete_frame_state["frame"]["soWhat"] = ""
        complete_frame_state["frame"]["details"][1] = ["Ships were stopped at sea"]

        resp = client.post("/api/export", json={"state": complete_frame_state})
        assert resp.status_code == 409
        assert resp.json()["detail"] == {"message": "Frame is not complete", "missing": ["details[1]", "soWhat"]}

    def test_empty_state_is_409(self, client):
        resp = client.post("/api/export", json={"state": {}})
        assert resp.status_code == 409
        assert resp.json()["detail"]["missing"] == ["keyTopic", "isAbout", "mainIdeas", "soWhat"]
