"""Shared fixtures: fake prompt services and a Flask test client. No network."""

import asyncio

import pytest

from app import create_app
from errors import GenerationFailed, TranslationFailed
from prompt_parts import PromptParts

NATIVE_PARTS = PromptParts(
    background="perpustakaan tua saat senja",
    subject="seorang gadis berambut pendek",
    pose="duduk membaca buku",
    camera="lensa 85mm, f/1.8, cahaya keemasan",
)

TRANSLATIONS = {
    NATIVE_PARTS.background: "an old library at dusk",
    NATIVE_PARTS.subject: "a short-haired girl",
    NATIVE_PARTS.pose: "sitting and reading a book",
    NATIVE_PARTS.camera: "85mm lens, f/1.8, golden light",
}


class FakePromptService:
    """Stands in for ``GeminiPromptService`` and records every call."""

    def __init__(self, parts=NATIVE_PARTS, generation_error=None, failing_texts=(), gates=None):
        self.parts = parts
        self.generation_error = generation_error
        self.failing_texts = set(failing_texts)
        self.gates = gates or {}
        self.generate_calls = []
        self.translate_calls = []

    async def generate_prompt_parts(self, idea):
        self.generate_calls.append(idea)
        if self.generation_error is not None:
            raise self.generation_error
        return self.parts

    async def translate(self, text):
        if not text:
            return ""
        self.translate_calls.append(text)
        gate = self.gates.get(text)
        if gate is not None:
            await gate.wait()
        await asyncio.sleep(0)
        if text in self.failing_texts:
            raise TranslationFailed("Failed to translate text.")
        return TRANSLATIONS.get(text, f"EN: {text}")


@pytest.fixture
def service():
    return FakePromptService()


@pytest.fixture
def failing_generation_service():
    return FakePromptService(
        generation_error=GenerationFailed("Failed to generate prompt details from Gemini API.")
    )


@pytest.fixture
def make_app():
    apps = []

    def _make(svc, **kwargs):
        app = create_app(svc, **kwargs)
        app.config["TESTING"] = True
        apps.append(app)
        return app

    yield _make

    for app in apps:
        app.extensions["prompt_studio"]["runner"].stop()


@pytest.fixture
def app(make_app, service):
    return make_app(service)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session_id(app):
    return app.extensions["prompt_studio"]["store"].create()
