import asyncio
import base64
import json

import httpx
import pytest

from services.elevenlabs.music_service import MUSIC_LENGTH_MS, MusicService
from services.elevenlabs.signed_url import SignedUrlService
from services.errors import MusicGenerationError, TokenFetchError


def _run_with_client(handler, build, call):
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await call(build(client))

    return asyncio.run(scenario())


def test_signed_url_success():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"signed_url": "wss://api.test/convai?token=t"})

    url = _run_with_client(
        handler,
        lambda client: SignedUrlService(client, "secret", "agent_abc", base_url="https://api.test"),
        lambda service: service.get_signed_url(),
    )
    assert url == "wss://api.test/convai?token=t"
    assert seen[0].url.path == "/v1/convai/conversation/get_signed_url"
    assert seen[0].url.params["agent_id"] == "agent_abc"
    assert seen[0].headers["xi-api-key"] == "secret"


def test_signed_url_upstream_status_is_preserved():
    with pytest.raises(TokenFetchError) as info:
        _run_with_client(
            lambda request: httpx.Response(401, text="bad key"),
            lambda client: SignedUrlService(client, "secret", "agent_abc"),
            lambda service: service.get_signed_url(),
        )
    assert info.value.status_code == 401


def test_signed_url_requires_api_key():
    with pytest.raises(TokenFetchError) as info:
        _run_with_client(
            lambda request: httpx.Response(200, json={"signed_url": "unused"}),
            lambda client: SignedUrlService(client, None, "agent_abc"),
            lambda service: service.get_signed_url(),
        )
    assert info.value.status_code == 500
    assert str(info.value) == "ELEVEN_LABS_API_KEY not configured"


def test_music_generation_returns_base64_mp3():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(200, content=b"ID3-fake-mp3")

    result = _run_with_client(
        handler,
        lambda client: MusicService(client, "secret"),
        lambda service: service.generate("  eerie tavern ambience  "),
    )
    assert bodies == [
        {
            "prompt": "eerie tavern ambience",
            "music_length_ms": MUSIC_LENGTH_MS,
            "model_id": "music_v1",
            "force_instrumental": True,
        }
    ]
    assert result["success"] is True
    assert base64.b64decode(result["audio"]) == b"ID3-fake-mp3"
    assert result["audioSize"] == len(b"ID3-fake-mp3")
    assert result["format"] == "mp3"


def test_music_rejects_blank_prompt():
    with pytest.raises(ValueError):
        _run_with_client(
            lambda request: httpx.Response(200, content=b""),
            lambda client: MusicService(client, "secret"),
            lambda service: service.generate("   "),
        )


def test_music_upstream_error_keeps_status():
    with pytest.raises(MusicGenerationError) as info:
        _run_with_client(
            lambda request: httpx.Response(422, text="bad prompt"),
            lambda client: MusicService(client, "secret"),
            lambda service: service.generate("epic battle drums"),
        )
    assert info.value.status_code == 422
    assert str(info.value).startswith("Eleven Labs API error: ")
