"""Test doubles for the conversation transport and upstream services."""

import asyncio
import json

from models.session_models import SceneImage


class FakeTransport:
    """In-memory stand-in for ElevenLabsConversation."""

    def __init__(self, handler, fail=None):
        self.handler = handler
        self.fail = fail
        self.started = []
        self.audio = []
        self.muted = False
        self.ended = False

    async def start(self, signed_url, dynamic_variables=None):
        if self.fail is not None:
            raise self.fail
        self.started.append((signed_url, dict(dynamic_variables or {})))

    async def set_muted(self, muted):
        self.muted = muted

    async def send_user_audio(self, audio_b64):
        if self.muted:
            return False
        self.audio.append(audio_b64)
        return True

    async def end(self):
        self.ended = True


class TransportFactory:
    def __init__(self, fail=None):
        self.fail = fail
        self.created = []

    def __call__(self, handler):
        transport = FakeTransport(handler, fail=self.fail)
        self.created.append(transport)
        return transport


class FakeTokenIssuer:
    def __init__(self, url="wss://agent.test/convai?token=abc"):
        self.url = url
        self.calls = 0

    @property
    def configured(self):
        return True

    async def get_signed_url(self):
        self.calls += 1
        return self.url


class EventRecorder:
    """Collects published session events."""

    def __init__(self):
        self.events = []

    async def __call__(self, event):
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if e["type"] == event_type]


class GatedIllustrator:
    """Image generator that blocks until `release()` is called."""

    def __init__(self):
        self.calls = []
        self.started = asyncio.Event()
        self._gate = asyncio.Event()

    def release(self):
        self._gate.set()

    async def generate(self, text):
        self.calls.append(text)
        self.started.set()
        await self._gate.wait()
        return SceneImage(url=f"https://img.test/{len(self.calls)}.png")


class InstantIllustrator:
    def __init__(self):
        self.calls = []

    @property
    def configured(self):
        return True

    async def generate(self, text):
        self.calls.append(text)
        return SceneImage(url=f"https://img.test/{len(self.calls)}.png", prompt=text)


class FakeSocket:
    """Conversation WebSocket double; iteration yields `frames` then waits for release."""

    def __init__(self, frames=(), close_error=None, hold=False):
        self.frames = list(frames)
        self.close_error = close_error
        self.hold = hold
        self.sent = []
        self.closed = False
        self.released = asyncio.Event()

    async def send(self, data):
        self.sent.append(json.loads(data))

    async def close(self):
        self.closed = True
        self.released.set()

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self.frames:
            yield frame
        if self.hold:
            await self.released.wait()
        if self.close_error is not None:
            raise self.close_error


class HeldTokenIssuer(FakeTokenIssuer):
    """Token issuer that waits for `release()` before answering."""

    def __init__(self, url="wss://agent.test/convai?token=abc"):
        super().__init__(url)
        self.requested = asyncio.Event()
        self._gate = asyncio.Event()

    def release(self):
        self._gate.set()

    async def get_signed_url(self):
        self.calls += 1
        self.requested.set()
        await self._gate.wait()
        return self.url


class SlowStartTransportFactory(TransportFactory):
    """Factory whose transports block in `start` until released."""

    def __init__(self):
        super().__init__()
        self.starting = asyncio.Event()
        self.gate = asyncio.Event()

    def __call__(self, handler):
        transport = super().__call__(handler)
        original_start = transport.start

        async def start(signed_url, dynamic_variables=None):
            self.starting.set()
            await self.gate.wait()
            await original_start(signed_url, dynamic_variables)

        transport.start = start
        return transport
