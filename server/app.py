"""FastAPI server for lessico application."""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Optional

from core.composer import SessionComposer
from core.config import DEFAULT_SESSION_SIZE, PERSONAL_CATEGORY
from core.dictionary import PersonalDictionaryStore
from core.errors import (
    GenerationFailed, GeneratorUnavailable, NotFound, StorageError
)
from core.focus import FocusModeManager
from core.interfaces import KeyValueStore, Recommender, WordGenerator
from core.mastery import MasteryStore
from core.models import DictionaryEntry, TranslationDirection
from core.preferences import PreferencesStore
from core.review import ReviewSelector
from core.session_state import SessionStateStore

logger = logging.getLogger(__name__)


# Pydantic models for API
class SessionRequest(BaseModel):
    category: str = PERSONAL_CATEGORY
    topic: str
    total_count: int = Field(default=DEFAULT_SESSION_SIZE, ge=1)
    exclude_words: list[str] = []
    direction: Optional[TranslationDirection] = None
    custom_instruction: Optional[str] = None


class TrackRequest(BaseModel):
    word: str
    translation: str
    category: str
    topic: str = ''
    is_correct: bool
    context: Optional[str] = None


class ReviewRequest(BaseModel):
    success: bool


class MasteryUpdateRequest(BaseModel):
    word: Optional[str] = None
    translation: Optional[str] = None
    context: Optional[str] = None


class FocusRequest(BaseModel):
    instruction: str


class DirectionRequest(BaseModel):
    direction: TranslationDirection


class Services:
    """Stores and composer wired to one key-value backend."""

    def __init__(self, store: KeyValueStore, generator: WordGenerator, recommender: Recommender,
                 fallback_on_unavailable: bool = True):
        self.store = store
        self.mastery = MasteryStore(store)
        self.dictionary = PersonalDictionaryStore(store)
        self.focus = FocusModeManager(store)
        self.session_store = SessionStateStore(store)
        self.preferences = PreferencesStore(store)
        self.review_selector = ReviewSelector(self.mastery, recommender, fallback_on_unavailable)
        self.composer = SessionComposer(
            self.review_selector, generator, self.session_store, self.preferences,
            focus_manager=self.focus, dictionary=self.dictionary
        )
        # Held by compose and by every route that writes to the store
        self.compose_lock = asyncio.Lock()


def get_api_key() -> str:
    """Get API key from environment variable first, then fall back to config file."""
    from server.file_storage import load_config

    api_key = os.environ.get('GEMINI_API_KEY')
    if not api_key:
        try:
            api_key = load_config().get('gemini_api_key')
        except FileNotFoundError:
            pass
    if not api_key:
        raise RuntimeError(
            "GEMINI_API_KEY environment variable not set and config file not found. "
            "Set GEMINI_API_KEY or create ~/.config/lessico/config.json"
        )
    return api_key


def build_services() -> Services:
    """Create storage and Gemini providers from the environment."""
    from server.gemini_provider import GeminiRecommender, GeminiWordGenerator

    # File storage by default, set LESSICO_STORAGE=postgres to use PostgreSQL
    storage_type = os.environ.get('LESSICO_STORAGE', 'file')
    if storage_type == 'postgres':
        from server.postgres_storage import PostgresStorage
        store = PostgresStorage()
        logger.info("Using PostgreSQL storage")
    else:
        from server.file_storage import FileStorage
        store = FileStorage()
        logger.info(f"Using file storage in {store.state_dir}")

    api_key = get_api_key()
    model_name = os.environ.get('LESSICO_MODEL', 'gemini-2.0-flash')
    generator = GeminiWordGenerator(api_key, model_name=model_name)
    recommender = GeminiRecommender(api_key, model_name=model_name)
    logger.info(f"AI providers initialized: {model_name}")
    return Services(store, generator, recommender)


def create_app(services: Services | None = None) -> FastAPI:
    """Build the API. Services are created from the environment at startup unless given."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, 'services', None) is None:
            app.state.services = build_services()
        yield

    app = FastAPI(title="Lessico API", description="Adaptive vocabulary sessions", lifespan=lifespan)
    app.state.services = services

    def get_services() -> Services:
        return app.state.services

    def store_lock() -> asyncio.Lock:
        return get_services().compose_lock

    @app.exception_handler(GenerationFailed)
    async def generation_failed_handler(request: Request, exc: GenerationFailed):
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(GeneratorUnavailable)
    async def generator_unavailable_handler(request: Request, exc: GeneratorUnavailable):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/")
    async def root():
        """Health check."""
        return {"service": "lessico", "status": "ok"}

    # Session Endpoints
    @app.post("/api/session")
    async def start_session(request: SessionRequest):
        """Compose a new session and return the saved result."""
        services = get_services()
        loop = asyncio.get_running_loop()
        async with services.compose_lock:
            await loop.run_in_executor(
                None,
                lambda: services.composer.compose(
                    request.category,
                    request.topic,
                    request.total_count,
                    exclude_words=request.exclude_words,
                    direction=request.direction,
                    custom_instruction=request.custom_instruction
                )
            )
            result = services.composer.last_result
        return result.to_dict()

    @app.get("/api/session")
    async def get_session():
        """Get the current session."""
        result = get_services().composer.current_session()
        if result is None:
            raise HTTPException(status_code=404, detail="No session in progress")
        return result.to_dict()

    # Mastery Endpoints
    @app.get("/api/mastery")
    async def list_mastery(category: Optional[str] = None, topic: Optional[str] = None):
        """List tracked words, optionally for one category/topic."""
        mastery = get_services().mastery
        records = mastery.list(category, topic) if category else mastery.all()
        return {"words": [r.to_dict() for r in records]}

    @app.post("/api/mastery/track")
    async def track_word(request: TrackRequest):
        """Record an answer for a word, creating its mastery record if needed."""
        async with store_lock():
            record = get_services().mastery.track_word(
                request.word, request.translation, request.category, request.topic,
                request.is_correct, request.context
            )
        return record.to_dict()

    @app.post("/api/mastery/{record_id}/review")
    async def review_word(record_id: str, request: ReviewRequest):
        """Apply a review outcome to a tracked word."""
        async with store_lock():
            return get_services().mastery.record_review(record_id, request.success).to_dict()

    @app.put("/api/mastery/{record_id}")
    async def update_word(record_id: str, request: MasteryUpdateRequest):
        """Edit a tracked word."""
        async with store_lock():
            record = get_services().mastery.update(
                record_id, word=request.word, translation=request.translation, context=request.context
            )
        return record.to_dict()

    @app.delete("/api/mastery/{record_id}")
    async def delete_word(record_id: str):
        """Stop tracking a word."""
        async with store_lock():
            get_services().mastery.remove(record_id)
        return {"success": True}

    # Focus Endpoints
    @app.get("/api/focus")
    async def get_focus():
        """Get the active focus session, if any."""
        session = get_services().focus.get_current_focus_session()
        return {"active": session is not None, "session": session.to_dict() if session else None}

    @app.post("/api/focus")
    async def set_focus(request: FocusRequest):
        """Enter focus mode with a new instruction."""
        async with store_lock():
            session = get_services().focus.set_current_focus(request.instruction)
        return {"active": True, "session": session.to_dict()}

    @app.delete("/api/focus")
    async def clear_focus():
        """Leave focus mode."""
        async with store_lock():
            get_services().focus.clear_current_focus()
        return {"active": False}

    @app.get("/api/focus/history")
    async def focus_history():
        """Recently used focus instructions."""
        return {"sessions": [s.to_dict() for s in get_services().focus.get_focus_sessions()]}

    # Personal Dictionary Endpoints
    @app.get("/api/dictionary")
    async def list_dictionary():
        """List dictionary entries and theme counts."""
        dictionary = get_services().dictionary
        return {"words": [e.to_dict() for e in dictionary.list()], "themes": dictionary.themes()}

    @app.post("/api/dictionary")
    async def add_dictionary_word(entry: DictionaryEntry):
        """Add a word. Returns success False if the pair already exists."""
        async with store_lock():
            added = get_services().dictionary.add(entry)
        if not added:
            return {"success": False, "error": "Word already in dictionary"}
        return {"success": True}

    @app.put("/api/dictionary/{entry_id}")
    async def update_dictionary_word(entry_id: str, entry: DictionaryEntry):
        """Edit a word."""
        async with store_lock():
            updated = get_services().dictionary.update(entry.model_copy(update={"id": entry_id}))
        if not updated:
            return {"success": False, "error": "Another entry already has this word pair"}
        return {"success": True}

    @app.delete("/api/dictionary/{entry_id}")
    async def delete_dictionary_word(entry_id: str):
        """Remove a word."""
        async with store_lock():
            removed = get_services().dictionary.remove(entry_id)
        if not removed:
            raise HTTPException(status_code=404, detail=f"No dictionary entry with id '{entry_id}'")
        return {"success": True}

    # Preferences Endpoints
    @app.get("/api/preferences/direction")
    async def get_direction():
        return {"direction": get_services().preferences.direction.value}

    @app.put("/api/preferences/direction")
    async def set_direction(request: DirectionRequest):
        async with store_lock():
            direction = get_services().preferences.set_direction(request.direction)
        return {"direction": direction.value}

    return app


app = create_app()
