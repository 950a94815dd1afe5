import json
import logging

from google import genai
from google.genai import types

from config import settings
from errors import GenerationFailed, ResponseFormatError, TranslationFailed, ValidationError
from prompt_parts import FIELDS, PromptParts
from system_prompt import (
    FIELD_DESCRIPTIONS,
    GENERATION_PROMPT,
    GENERATION_SYSTEM_PROMPT,
    TRANSLATION_PROMPT,
    TRANSLATION_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

BLANK_IDEA_MESSAGE = "Mohon masukkan ide awal untuk prompt."
GENERATION_FAILED_MESSAGE = "Failed to generate prompt details from Gemini API."
TRANSLATION_FAILED_MESSAGE = "Failed to translate text."

PROMPT_PARTS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        name: types.Schema(type=types.Type.STRING, description=FIELD_DESCRIPTIONS[name])
        for name in FIELDS
    },
    required=list(FIELDS),
)


def build_client(api_key=None, timeout_ms=None):
    api_key = api_key or settings.GEMINI_API_KEY
    if not api_key:
        raise RuntimeError("GEMINI_API_KEY environment variable not set")
    return genai.Client(
        api_key=api_key,
        http_options=types.HttpOptions(timeout=timeout_ms or settings.GEMINI_TIMEOUT_MS),
    )


def build_config(system_instruction, schema=None):
    kwargs = {"system_instruction": system_instruction}
    if schema is not None:
        kwargs["response_mime_type"] = "application/json"
        kwargs["response_schema"] = schema
    return types.GenerateContentConfig(**kwargs)


def parse_prompt_parts(raw_text: str | None) -> PromptParts:
    """Parse the JSON reply of the generation call into ``PromptParts``.

    Every one of the four fields must be present and non-empty.
    """
    if not raw_text:
        raise ResponseFormatError("Empty response from model.", raw_text)
    try:
        data = json.loads(raw_text.strip())
    except json.JSONDecodeError as e:
        raise ResponseFormatError(f"Response is not valid JSON: {e}", raw_text) from e

    if not isinstance(data, dict):
        raise ResponseFormatError("Response JSON is not an object.", raw_text)

    missing = [name for name in FIELDS if not data.get(name)]
    if missing:
        raise ResponseFormatError(
            f"Invalid JSON structure received from API, missing: {', '.join(missing)}",
            raw_text,
        )
    return PromptParts.from_dict(data)


class GeminiPromptService:
    """Expands ideas into prompt fields and translates them with Gemini."""

    def __init__(self, client: genai.Client, model: str | None = None):
        self.client = client
        self.model = model or settings.GEMINI_MODEL
        self._generation_config = build_config(GENERATION_SYSTEM_PROMPT, PROMPT_PARTS_SCHEMA)
        self._translation_config = build_config(TRANSLATION_SYSTEM_PROMPT)

    @classmethod
    def from_settings(cls):
        return cls(build_client(), settings.GEMINI_MODEL)

    async def generate_prompt_parts(self, idea: str) -> PromptParts:
        if not idea.strip():
            raise ValidationError(BLANK_IDEA_MESSAGE)

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=GENERATION_PROMPT.format(idea=idea),
                config=self._generation_config,
            )
            return parse_prompt_parts(response.text)
        except Exception as e:
            logger.exception("Error generating prompt details")
            raise GenerationFailed(GENERATION_FAILED_MESSAGE) from e

    async def translate(self, text: str) -> str:
        if not text:
            return ""

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=TRANSLATION_PROMPT.format(text=text),
                config=self._translation_config,
            )
        except Exception as e:
            logger.exception("Error translating text")
            raise TranslationFailed(TRANSLATION_FAILED_MESSAGE) from e
        return (response.text or "").strip()
