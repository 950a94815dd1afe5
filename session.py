import asyncio
import enum
import logging
import secrets
import threading
import time
from collections import OrderedDict

from config import settings
from errors import ClipboardError, GenerationFailed, ValidationError
from gemini_service import BLANK_IDEA_MESSAGE
from prompt_assembly import assemble_final, combined_text
from prompt_parts import FIELDS, PromptParts

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Terjadi kesalahan yang tidak diketahui."
TRANSLATION_BATCH_FAILED_MESSAGE = "Gagal menerjemahkan prompt. Silakan coba lagi."
EDIT_NOT_ALLOWED_MESSAGE = "Buat prompt terlebih dahulu sebelum mengedit."

COPIED_TEXT = "Disalin!"
COPY_FAILED_TEXT = "Gagal"

COPY_TARGETS = ("id-all", "en-all", "json-final")


class Phase(str, enum.Enum):
    IDLE = "idle"
    GENERATING = "generating"
    GENERATED = "generated"
    GENERATION_FAILED = "generation_failed"


class TranslationPhase(str, enum.Enum):
    NONE = "none"
    TRANSLATING = "translating"
    TRANSLATED = "translated"
    TRANSLATION_FAILED = "translation_failed"


async def translate_fields(translate, parts: PromptParts) -> PromptParts:
    """Translate all four fields concurrently and return them as one record.

    All-or-nothing: when any call fails the others are cancelled and the
    first error is raised, so no partial result ever leaves this function.
    """
    tasks = {name: asyncio.ensure_future(translate(getattr(parts, name))) for name in FIELDS}
    try:
        await asyncio.gather(*tasks.values())
    except BaseException:
        for task in tasks.values():
            task.cancel()
        await asyncio.gather(*tasks.values(), return_exceptions=True)
        raise
    return PromptParts(**{name: task.result() for name, task in tasks.items()})


class CopyFeedback:
    """Transient "copied"/"failed" labels, tracked independently per target id."""

    def __init__(self, duration=settings.COPY_FEEDBACK_SECONDS, clock=time.monotonic):
        self.duration = duration
        self.clock = clock
        self._entries = {}

    def record(self, target_id, ok):
        text = COPIED_TEXT if ok else COPY_FAILED_TEXT
        self._entries[target_id] = (text, self.clock() + self.duration)

    def active(self):
        now = self.clock()
        self._entries = {k: v for k, v in self._entries.items() if v[1] > now}
        return {k: text for k, (text, _expires) in self._entries.items()}


class PromptSession:
    """State of one browser session: the prompt pair and the UI flags."""

    def __init__(self, service, copy_feedback_seconds=settings.COPY_FEEDBACK_SECONDS,
                 clock=time.monotonic):
        self.service = service
        self.native = PromptParts()
        self.translated = PromptParts()
        self.phase = Phase.IDLE
        self.translation_phase = TranslationPhase.NONE
        self.error = None
        self.copy_feedback = CopyFeedback(copy_feedback_seconds, clock)
        self.generation = 0

    @property
    def loading(self):
        return self.phase is Phase.GENERATING

    @property
    def translating(self):
        return self.translation_phase is TranslationPhase.TRANSLATING

    async def generate(self, idea: str) -> bool:
        if not idea.strip():
            self.error = BLANK_IDEA_MESSAGE
            return False

        self.generation += 1
        generation = self.generation
        self.phase = Phase.GENERATING
        self.error = None
        self.native = PromptParts()
        self.translated = PromptParts()
        self.translation_phase = TranslationPhase.NONE

        try:
            parts = await self.service.generate_prompt_parts(idea)
        except GenerationFailed as e:
            if generation != self.generation:
                return False
            self.error = str(e) or UNKNOWN_ERROR_MESSAGE
            self.phase = Phase.GENERATION_FAILED
            return False
        except Exception:
            logger.exception("Unexpected error while generating prompt")
            if generation != self.generation:
                return False
            self.error = UNKNOWN_ERROR_MESSAGE
            self.phase = Phase.GENERATION_FAILED
            return False

        if generation != self.generation:
            logger.info("Discarding result of superseded generation %s", generation)
            return False

        self.phase = Phase.GENERATED
        await self._set_native(parts)
        return True

    async def _set_native(self, parts: PromptParts):
        self.native = parts
        if parts.subject:
            await self.translate_all(parts)

    async def translate_all(self, parts: PromptParts) -> bool:
        """Translate ``parts`` and commit the result in one assignment.

        A batch started before a newer ``generate`` commits nothing.
        """
        generation = self.generation
        self.translation_phase = TranslationPhase.TRANSLATING
        try:
            translated = await translate_fields(self.service.translate, parts)
        except Exception as e:
            if generation != self.generation:
                logger.info("Discarding failed translation of superseded generation %s", generation)
                return False
            logger.warning("Translation batch failed: %r", e)
            self.error = TRANSLATION_BATCH_FAILED_MESSAGE
            self.translation_phase = TranslationPhase.TRANSLATION_FAILED
            return False

        if generation != self.generation:
            logger.info("Discarding translation of superseded generation %s", generation)
            return False
        self.translated = translated
        self.translation_phase = TranslationPhase.TRANSLATED
        return True

    def edit_field(self, name, value):
        if self.phase is not Phase.GENERATED:
            raise ValidationError(EDIT_NOT_ALLOWED_MESSAGE)
        self.native = self.native.with_field(name, value)

    def copy_targets(self):
        return {
            "id-all": combined_text(self.native),
            "en-all": combined_text(self.translated),
            "json-final": assemble_final(self.translated),
        }

    def record_copy(self, target_id, error: ClipboardError | None = None):
        if target_id not in COPY_TARGETS:
            raise ValidationError(f"Unknown copy target: {target_id}")
        if error is not None:
            logger.warning("Could not copy %s: %s", target_id, error)
        self.copy_feedback.record(target_id, ok=error is None)

    def snapshot(self):
        targets = self.copy_targets()
        return {
            "phase": self.phase.value,
            "translation_phase": self.translation_phase.value,
            "loading": self.loading,
            "translating": self.translating,
            "error": self.error,
            "native": self.native.to_dict(),
            "translated": self.translated.to_dict(),
            "has_results": self.native.has_subject,
            "combined_native": targets["id-all"],
            "combined_translated": targets["en-all"],
            "final_prompt": targets["json-final"],
            "copy_feedback": self.copy_feedback.active(),
        }


class SessionStore:
    """Sessions keyed by random id. The oldest ones are dropped past ``max_sessions``."""

    def __init__(self, factory, max_sessions=settings.MAX_SESSIONS):
        self.factory = factory
        self.max_sessions = max_sessions
        self._sessions = OrderedDict()
        self._lock = threading.Lock()

    def create(self):
        session_id = secrets.token_urlsafe(16)
        with self._lock:
            self._sessions[session_id] = self.factory()
            while len(self._sessions) > self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Evicted session %s", evicted)
        return session_id

    def get(self, session_id):
        with self._lock:
            return self._sessions.get(session_id)

    def __len__(self):
        with self._lock:
            return len(self._sessions)
