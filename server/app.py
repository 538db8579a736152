"""FastAPI server for wordloom application."""

import logging
import os
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from core.config import DAILY_GOAL, ENTRY_TYPES, ENTRY_WORD
from core.interfaces import Storage
from core.models import Item, Sentence
from core.progression import MODE_NORMAL
from core.prompts import build_qa_prompt, build_writing_prompt
from core.repository import ItemRepository, ProgressTracker
from core.session import StudySession
from core.stats import dashboard
from core.study import StudyService
from core.transfer import ImportFormatError, export_payload, parse_import
from core.utils import now_ms
from core.writing import DailyWriting, DailyWritingTracker

from server.file_storage import FileStorage

logger = logging.getLogger(__name__)


# Pydantic models for API
class SentenceRequest(BaseModel):
    en: str
    ja: str = ""
    s5: Optional[list[int]] = None
    s6: Optional[list[int]] = None


class WordRequest(BaseModel):
    word: str
    meaning: str
    entry_type: str = ENTRY_WORD
    sentences: list[SentenceRequest] = []
    qa_memo: Optional[str] = None
    user_id: str = "default"


class SessionRequest(BaseModel):
    mode: str = MODE_NORMAL
    limit: Optional[int] = None
    user_id: str = "default"


class AnswerRequest(BaseModel):
    answer: Optional[str] = None       # Chosen label or typed text
    answers: Optional[list[str]] = None  # One entry per blank (multi-blank cloze)
    correct: Optional[bool] = None     # Self-judged OK/NG


class SessionResponse(BaseModel):
    session_id: str
    mode: str
    target: int
    position: int
    answered: int
    correct: int
    finished: bool
    message: Optional[str]


class QuestionResponse(BaseModel):
    session: SessionResponse
    question: Optional[dict]


class AnswerResponse(BaseModel):
    correct: bool
    persisted: bool
    expected: list[str]
    item: Optional[dict]
    today_progress: int
    session: SessionResponse


class WritingRequest(BaseModel):
    user_id: str = "default"
    exclude_weakness: Optional[bool] = None


class DraftRequest(BaseModel):
    draft: str
    user_id: str = "default"


class QaPromptRequest(BaseModel):
    question: str = ""
    user_id: str = "default"


class DashboardResponse(BaseModel):
    total_words: int
    weak_words: int
    due_now: int
    overdue: int
    upcoming: int
    learned: int
    in_progress: int
    challenge_ready: int
    today_progress: int
    daily_goal: int


# Global state (in production, use proper DI)
storage: Storage = None
clock = now_ms
user_services: dict[str, StudyService] = {}
writing_trackers: dict[str, DailyWritingTracker] = {}
study_sessions: dict[str, tuple[str, StudySession]] = {}  # session_id -> (user_id, session)


def create_storage() -> Storage:
    """Pick the storage backend from WORDLOOM_STORAGE (file or postgres)."""
    storage_type = os.environ.get('WORDLOOM_STORAGE', 'file')
    if storage_type == 'postgres':
        from server.postgres_storage import PostgresStorage
        logger.info("Using PostgreSQL storage")
        return PostgresStorage()
    logger.info("Using file storage")
    return FileStorage()


def get_storage() -> Storage:
    global storage
    if storage is None:
        storage = create_storage()
    return storage


def log_event(event: str, user_id: str, session_id: str = None, **data) -> None:
    """Log an event to storage backends that keep an event log."""
    backend = get_storage()
    if hasattr(backend, 'log_event'):
        backend.log_event(event, user_id, session_id, **data)


def get_service(user_id: str = "default") -> StudyService:
    """Get or create the study service for a user."""
    if user_id not in user_services:
        repository = ItemRepository(get_storage(), user_id)
        repository.subscribe(lambda: log_event('items.changed', user_id))
        user_services[user_id] = StudyService(
            repository, ProgressTracker(get_storage(), user_id), clock=clock)
    return user_services[user_id]


def get_writing(user_id: str = "default") -> DailyWritingTracker:
    if user_id not in writing_trackers:
        writing_trackers[user_id] = DailyWritingTracker(get_storage(), user_id)
    return writing_trackers[user_id]


def writing_payload(state: DailyWriting, items: list[Item]) -> dict:
    target = next((item for item in items if item.id == state.target_id), None)
    return {
        'date': state.date,
        'target': target.to_dict() if target else None,
        'exclude_weakness': state.exclude_weakness,
        'draft': state.draft,
        'ai_done': state.ai_done,
        'prompt': build_writing_prompt(target, state.draft) if target else None
    }


def get_session(session_id: str) -> tuple[StudyService, StudySession]:
    if session_id not in study_sessions:
        raise HTTPException(status_code=404, detail="Session not found")
    user_id, session = study_sessions[session_id]
    return get_service(user_id), session


def build_sentences(requests: list[SentenceRequest]) -> list[Sentence]:
    try:
        return [Sentence.create(s.en, s.ja, s.s5, s.s6) for s in requests]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


app = FastAPI(title="Wordloom API", description="Vocabulary study and review scheduling API")


@app.on_event("startup")
async def startup():
    """Initialize storage on startup."""
    get_storage()


@app.get("/")
async def root():
    """Health check."""
    return {"status": "ok", "service": "wordloom"}


@app.get("/api/users")
async def list_users():
    """List users that have stored words."""
    return {"users": get_storage().list_users()}


# Word Endpoints
@app.get("/api/words")
async def list_words(user_id: str = "default"):
    items = get_service(user_id).repository.get_all()
    return {"words": [item.to_dict() for item in items]}


@app.post("/api/words")
async def create_word(request: WordRequest):
    sentences = build_sentences(request.sentences)
    try:
        item = get_service(request.user_id).create_item(
            request.word, request.meaning, request.entry_type, sentences, request.qa_memo)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    log_event('word.create', request.user_id, item_id=item.id)
    return item.to_dict()


@app.get("/api/words/{item_id}")
async def get_word(item_id: str, user_id: str = "default"):
    item = get_service(user_id).repository.get(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Word not found")
    return item.to_dict()


@app.put("/api/words/{item_id}")
async def update_word(item_id: str, request: WordRequest):
    """Edit authoring fields; learning progress is kept."""
    service = get_service(request.user_id)
    sentences = build_sentences(request.sentences)
    if request.entry_type not in ENTRY_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown entry type: {request.entry_type}")
    now = service.clock()

    def edit(current):
        updated = current.copy()
        updated.word = request.word
        updated.meaning = request.meaning
        updated.entry_type = request.entry_type
        updated.sentences = sentences
        updated.qa_memo = request.qa_memo
        updated.updated_at = now
        return updated

    item = service.repository.update(item_id, edit)
    if item is None:
        raise HTTPException(status_code=404, detail="Word not found")
    return item.to_dict()


@app.delete("/api/words/{item_id}")
async def delete_word(item_id: str, user_id: str = "default"):
    if not get_service(user_id).repository.delete(item_id):
        raise HTTPException(status_code=404, detail="Word not found")
    log_event('word.delete', user_id, item_id=item_id)
    return {"success": True}


# Study Endpoints
@app.post("/api/sessions", response_model=SessionResponse)
async def start_session(request: SessionRequest):
    """Build a study queue for the requested mode."""
    service = get_service(request.user_id)
    try:
        session = service.start_session(request.mode, request.limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    # One active session per user; starting a new one drops the previous
    for stale_id in [sid for sid, (uid, _) in study_sessions.items() if uid == request.user_id]:
        del study_sessions[stale_id]
    study_sessions[session.id] = (request.user_id, session)
    log_event('session.start', request.user_id, session.id, mode=session.mode, target=session.target)
    return SessionResponse(**session.to_dict())


@app.get("/api/sessions/{session_id}/question", response_model=QuestionResponse)
async def get_question(session_id: str):
    """Current question, or none once the session is finished."""
    service, session = get_session(session_id)
    content = service.current_question(session)
    return QuestionResponse(
        session=SessionResponse(**session.to_dict()),
        question=content.to_dict() if content else None
    )


@app.post("/api/sessions/{session_id}/answer", response_model=AnswerResponse)
async def submit_answer(session_id: str, request: AnswerRequest):
    service, session = get_session(session_id)
    content = service.current_question(session)
    if content is None:
        raise HTTPException(status_code=400, detail="Session finished")
    if not content.available:
        raise HTTPException(status_code=409, detail=content.reason)

    if request.answers is not None:
        response = request.answers
    elif request.answer is not None:
        response = request.answer
    elif request.correct is not None:
        response = request.correct
    else:
        raise HTTPException(status_code=400, detail="One of answer, answers or correct is required")

    user_id = study_sessions[session_id][0]
    result = service.answer(session, response)
    log_event('answer', user_id, session_id, item_id=content.item_id, stage=content.stage,
              mode=session.mode, correct=result['correct'])
    return AnswerResponse(**result)


@app.post("/api/sessions/{session_id}/skip", response_model=SessionResponse)
async def skip_question(session_id: str):
    """Skip the current question (e.g. cloze not configured yet)."""
    service, session = get_session(session_id)
    service.skip(session)
    return SessionResponse(**session.to_dict())


@app.get("/api/dashboard", response_model=DashboardResponse)
async def get_dashboard(user_id: str = "default"):
    service = get_service(user_id)
    now = service.clock()
    stats = dashboard(service.repository.get_all(), now)
    return DashboardResponse(
        **stats,
        today_progress=service.progress.today_count(now),
        daily_goal=DAILY_GOAL
    )


# Writing practice and assistant prompts
@app.get("/api/writing/today")
async def writing_today(user_id: str = "default", exclude_weakness: Optional[bool] = None):
    """Today's writing target, drawn once per local day."""
    service = get_service(user_id)
    items = service.repository.get_all()
    state = get_writing(user_id).today(items, service.clock(), exclude_weakness)
    return writing_payload(state, items)


@app.post("/api/writing/reshuffle")
async def writing_reshuffle(request: WritingRequest):
    service = get_service(request.user_id)
    items = service.repository.get_all()
    state = get_writing(request.user_id).reshuffle(items, service.clock(), request.exclude_weakness)
    return writing_payload(state, items)


@app.put("/api/writing/draft")
async def writing_draft(request: DraftRequest):
    service = get_service(request.user_id)
    items = service.repository.get_all()
    state = get_writing(request.user_id).save_draft(items, service.clock(), request.draft)
    return writing_payload(state, items)


@app.post("/api/writing/done")
async def writing_done(request: WritingRequest):
    """Record that today's draft was sent for correction."""
    service = get_service(request.user_id)
    items = service.repository.get_all()
    state = get_writing(request.user_id).mark_done(items, service.clock())
    log_event('writing.done', request.user_id, item_id=state.target_id)
    return writing_payload(state, items)


@app.post("/api/words/{item_id}/qa-prompt")
async def qa_prompt(item_id: str, request: QaPromptRequest):
    item = get_service(request.user_id).repository.get(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Word not found")
    return {"prompt": build_qa_prompt(item, request.question)}


# Export / Import
@app.get("/api/export")
async def export_words(user_id: str = "default"):
    service = get_service(user_id)
    return export_payload(service.repository.get_all(), service.clock())


@app.post("/api/import")
async def import_words(payload: dict, user_id: str = "default"):
    """Replace the whole collection with an exported payload."""
    try:
        items = parse_import(payload)
    except ImportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    get_service(user_id).repository.replace_all(items)
    logger.info(f"Imported {len(items)} words for {user_id}")
    log_event('words.import', user_id, count=len(items))
    return {"success": True, "count": len(items)}


@app.get("/api/events/recent")
async def recent_events(user_id: str = "default", limit: int = 50):
    """Recent logged events (backends with an event log only)."""
    backend = get_storage()
    if not hasattr(backend, 'get_user_events'):
        return {"events": []}
    return {"events": backend.get_user_events(user_id, limit=limit)}
