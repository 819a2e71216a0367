import pytest
from fastapi.testclient import TestClient

from fakes import FakeTokenIssuer, InstantIllustrator, TransportFactory
from services.errors import ImageGenerationError, TokenFetchError

VALID_CONFIG = {
    "musicTheme": "eerie",
    "campaignLength": "short",
    "genre": "Heist",
    "players": [{"name": "Aria", "species": "Elf", "class": "Ranger"}],
}


@pytest.fixture
def client(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_DIR", str(tmp_path))
    for name in ("ELEVEN_LABS_API_KEY", "FAL_KEY", "ELEVENLABS_AGENT_ID", "ELEVENLABS_API_BASE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ILLUSTRATION_DEBOUNCE_SECONDS", "0.05")

    import main

    with TestClient(main.app) as test_client:
        yield test_client


class FailingTokenIssuer:
    configured = True

    async def get_signed_url(self):
        raise TokenFetchError("Failed to get signed URL", status_code=503)


class FailingIllustrator:
    configured = True

    async def generate(self, text):
        raise ImageGenerationError("fal.ai down")


def test_health_reports_missing_credentials(client):
    body = client.get("/health").json()
    assert body["ok"] is True
    assert body["elevenlabs_configured"] is False
    assert body["fal_configured"] is False


def test_token_without_api_key_returns_error(client):
    response = client.get("/api/elevenlabs-token")
    assert response.status_code == 500
    assert response.json() == {"error": "ELEVEN_LABS_API_KEY not configured"}


def test_token_get_and_post_return_signed_url(client):
    client.app.state.signed_urls = FakeTokenIssuer()
    assert client.get("/api/elevenlabs-token").json() == {"signedUrl": "wss://agent.test/convai?token=abc"}
    response = client.post("/api/elevenlabs-token", json={"campaignGenre": "Heist"})
    assert response.status_code == 200
    assert client.app.state.signed_urls.calls == 2


def test_token_upstream_status_is_passed_through(client):
    client.app.state.signed_urls = FailingTokenIssuer()
    response = client.get("/api/elevenlabs-token")
    assert response.status_code == 503
    assert response.json() == {"error": "Failed to get signed URL"}


def test_generate_image_requires_narration(client):
    response = client.post("/api/generate-image", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "narratorText is required"}


def test_generate_image_returns_url(client):
    client.app.state.scene_illustrator = InstantIllustrator()
    response = client.post("/api/generate-image", json={"narratorText": "The airship drifts over the canyon."})
    assert response.status_code == 200
    assert response.json()["imageUrl"] == "https://img.test/1.png"


def test_generate_image_failure_is_500(client):
    client.app.state.scene_illustrator = FailingIllustrator()
    response = client.post("/api/generate-image", json={"narratorText": "The airship drifts over the canyon."})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate image"}


def test_music_requires_prompt(client):
    response = client.post("/api/music/generate", json={"prompt": "   "})
    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required and must be a non-empty string"}


def test_music_without_api_key_is_500(client):
    response = client.post("/api/music/generate", json={"prompt": "spooky harpsichord"})
    assert response.status_code == 500
    assert "ELEVEN_LABS_API_KEY" in response.json()["error"]


def test_config_round_trip(client):
    assert client.get("/api/config").status_code == 404

    saved = client.put("/api/config", json=VALID_CONFIG)
    assert saved.status_code == 200
    assert saved.json()["players"] == [{"playerNumber": 1, "name": "Aria", "species": "Elf", "class": "Ranger"}]

    loaded = client.get("/api/config").json()
    assert loaded["genre"] == "Heist"
    assert loaded["musicTheme"] == "eerie"


def test_config_validation(client):
    response = client.put("/api/config", json={**VALID_CONFIG, "genre": ""})
    assert response.status_code == 400
    assert response.json() == {"error": "genre is required"}


def test_config_options(client):
    options = client.get("/api/config/options").json()
    assert "Tiefling" in options["species"]
    assert "Blood Hunter" in options["classes"]
    assert options["campaignLengths"][0] == "quickie-quickie"


def test_play_socket_without_config_reports_config_missing(client):
    with client.websocket_connect("/ws/play") as websocket:
        message = websocket.receive_json()
    assert message["type"] == "error"
    assert message["code"] == "config_missing"


def test_play_socket_runs_session(client):
    client.put("/api/config", json=VALID_CONFIG)
    factory = TransportFactory()
    client.app.state.signed_urls = FakeTokenIssuer()
    client.app.state.conversation_factory = factory
    client.app.state.scene_illustrator = InstantIllustrator()

    with client.websocket_connect("/ws/play") as websocket:
        connecting = websocket.receive_json()
        assert connecting == {
            "type": "connection.state",
            "state": "connecting",
            "error": None,
            "muted": False,
            "retryable": False,
        }
        snapshot = websocket.receive_json()
        assert snapshot["type"] == "session.snapshot"
        session_id = snapshot["session_id"]

        assert client.get("/sessions").json() == {"sessions": [session_id]}
        assert factory.created[0].started[0][1]["player1Name"] == "Aria"

        websocket.send_json({"type": "session.mute", "muted": True})
        assert websocket.receive_json() == {"type": "session.muted", "muted": True}

        websocket.send_json({"type": "bogus", "request_id": "r1"})
        error = websocket.receive_json()
        assert error == {"type": "error", "request_id": "r1", "detail": "Unsupported message type."}

        websocket.send_json({"type": "session.snapshot", "request_id": "r2"})
        again = websocket.receive_json()
        assert again["request_id"] == "r2"
        assert again["connection"]["muted"] is True

        rest = client.get(f"/sessions/{session_id}").json()
        assert rest["session_id"] == session_id


def test_unknown_session_is_404(client):
    response = client.get("/sessions/missing")
    assert response.status_code == 404
    assert response.json() == {"error": "Session missing not found"}


def test_play_socket_refuses_reconnect_after_end(client):
    client.put("/api/config", json=VALID_CONFIG)
    factory = TransportFactory()
    client.app.state.signed_urls = FakeTokenIssuer()
    client.app.state.conversation_factory = factory

    with client.websocket_connect("/ws/play") as websocket:
        websocket.receive_json()
        session_id = websocket.receive_json()["session_id"]

        websocket.send_json({"type": "session.end"})
        ended = websocket.receive_json()
        assert ended["type"] == "connection.state"
        assert ended["state"] == "disconnected"

        websocket.send_json({"type": "session.reconnect", "request_id": "again"})
        assert websocket.receive_json() == {
            "type": "error",
            "request_id": "again",
            "detail": "Session is closed; start a new session.",
        }

        response = client.post(f"/sessions/{session_id}/reconnect")
        assert response.status_code == 409
        assert response.json() == {"error": "Session is closed; start a new session."}

    assert len(factory.created) == 1
    assert factory.created[0].ended


def test_delete_config_forgets_the_slot(client):
    assert client.delete("/api/config").status_code == 404
    client.put("/api/config", json=VALID_CONFIG)

    response = client.delete("/api/config")
    assert response.status_code == 200
    assert response.json() == {"deleted": True}
    assert client.get("/api/config").status_code == 404


def test_session_transcript_route(client):
    client.put("/api/config", json=VALID_CONFIG)
    client.app.state.signed_urls = FakeTokenIssuer()
    client.app.state.conversation_factory = TransportFactory()

    with client.websocket_connect("/ws/play") as websocket:
        websocket.receive_json()
        session_id = websocket.receive_json()["session_id"]
        body = client.get(f"/sessions/{session_id}/transcript").json()
        assert body == {"session_id": session_id, "turns": 0, "text": ""}

    assert client.get("/sessions/missing/transcript").status_code == 404
