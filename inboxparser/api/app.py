"""FastAPI web application for inboxparser."""

import logging
import threading
import uuid
from collections import OrderedDict
from contextlib import asynccontextmanager
from datetime import date
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from inboxparser.database.database import SessionLocal, get_db, init_db
from inboxparser.database.repository import GoalRepository, TaskRepository
from inboxparser.engine.breakdown import generate_breakdown, generate_breakdown_from_answers
from inboxparser.engine.clarification import ClarificationError, generate_questions, merge_answers
from inboxparser.engine.confidence import (
    get_field_actions,
    get_missing_fields,
    get_suggestions,
    should_show_quick_confirm,
)
from inboxparser.engine.deep_prompts import get_questions_for_aspect
from inboxparser.engine.goal_matcher import GoalMatcher
from inboxparser.engine.pipeline import CapturePipeline, ParserConfig, create_task_from_capture
from inboxparser.engine.scheduler import EnhancementScheduler, SchedulerStoppedError
from inboxparser.engine.slot_analyzer import analyze_slots
from inboxparser.integrations.llm_client import LLMClient
from inboxparser.models.breakdown import DeepPromptQuestion, TaskBreakdown
from inboxparser.models.clarification import ClarificationResult, SlotAnalysis
from inboxparser.models.enums import FieldAction, LifeAspect, TimePreference
from inboxparser.models.parsed import ParsedResult
from inboxparser.models.task import Task
from inboxparser.models.task_factory import IncompleteSuggestionError

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"
MAX_CAPTURE_LENGTH = 2000
MAX_STORED_ENHANCEMENTS = 256


class EnhancementStore:
    """Enhanced results waiting to be fetched, oldest evicted first."""

    def __init__(self, capacity: int = MAX_STORED_ENHANCEMENTS):
        self.capacity = capacity
        self._results: "OrderedDict[str, ParsedResult]" = OrderedDict()
        self._lock = threading.Lock()

    def put(self, capture_id: str, result: ParsedResult) -> None:
        with self._lock:
            self._results[capture_id] = result
            self._results.move_to_end(capture_id)
            while len(self._results) > self.capacity:
                self._results.popitem(last=False)

    def get(self, capture_id: str) -> Optional[ParsedResult]:
        with self._lock:
            return self._results.get(capture_id)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    config = ParserConfig.from_env()
    app.state.config = config
    app.state.llm_client = LLMClient() if config.enable_llm else None
    app.state.enhancements = EnhancementStore()
    scheduler = EnhancementScheduler(config)
    scheduler.start()
    app.state.scheduler = scheduler
    try:
        yield
    finally:
        scheduler.stop()


# Initialize FastAPI app
app = FastAPI(
    title="inboxparser API",
    description="Turns short free-text captures into structured, confidence-scored tasks",
    version=API_VERSION,
    lifespan=lifespan,
)


# Dependencies
def get_config(request: Request) -> ParserConfig:
    return getattr(request.app.state, "config", None) or ParserConfig.from_env()


def get_llm_client(request: Request):
    return getattr(request.app.state, "llm_client", None)


def get_scheduler(request: Request) -> Optional[EnhancementScheduler]:
    return getattr(request.app.state, "scheduler", None)


def get_session_factory():
    return SessionLocal


def get_enhancement_store(request: Request) -> EnhancementStore:
    store = getattr(request.app.state, "enhancements", None)
    if store is None:
        store = EnhancementStore()
        request.app.state.enhancements = store
    return store


def get_pipeline(
    db: Session = Depends(get_db),
    llm_client=Depends(get_llm_client),
    config: ParserConfig = Depends(get_config),
) -> CapturePipeline:
    matcher = GoalMatcher(GoalRepository(db), TaskRepository(db))
    return CapturePipeline(goal_matcher=matcher, llm_client=llm_client, config=config)


# Request/response models
class ParseRequest(BaseModel):
    """Request to parse a capture."""
    text: str = Field(..., max_length=MAX_CAPTURE_LENGTH)
    today: Optional[date] = Field(None, description="Reference date, defaults to today in the regional timezone")
    enhance: bool = Field(False, description="Run the language-model step inline, bounded by its timeout")


class ParseResponse(BaseModel):
    """Parsed capture plus the decisions a client needs to render it."""
    capture_id: str
    result: ParsedResult
    analysis: SlotAnalysis
    field_actions: Dict[str, FieldAction]
    show_quick_confirm: bool
    missing_fields: List[str]
    suggestions: List[str]
    enhancement_pending: bool = False


class AnalyzeRequest(BaseModel):
    result: ParsedResult


class QuestionsRequest(BaseModel):
    text: str = Field(..., max_length=MAX_CAPTURE_LENGTH)
    result: ParsedResult


class MergeRequest(BaseModel):
    result: ParsedResult
    answers: Dict[str, str]
    today: Optional[date] = None


class CreateTaskRequest(BaseModel):
    result: ParsedResult
    source_text: Optional[str] = Field(None, max_length=MAX_CAPTURE_LENGTH)


class BreakdownRequest(BaseModel):
    aspect: LifeAspect
    answers: Dict[str, str] = Field(default_factory=dict, description="Deep prompt answers keyed by question_key")
    time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    location: Optional[str] = None
    time_preference: Optional[TimePreference] = None
    total_duration: Optional[int] = Field(None, gt=0)


def _build_response(
    capture_id: str, result: ParsedResult, config: ParserConfig, enhancement_pending: bool = False
) -> ParseResponse:
    threshold = config.min_confidence_for_auto_fill
    return ParseResponse(
        capture_id=capture_id,
        result=result,
        analysis=analyze_slots(result),
        field_actions=get_field_actions(result, threshold),
        show_quick_confirm=should_show_quick_confirm(result, threshold),
        missing_fields=get_missing_fields(result),
        suggestions=get_suggestions(result),
        enhancement_pending=enhancement_pending,
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": API_VERSION}


@app.post("/parse", response_model=ParseResponse)
def parse_capture(
    request: ParseRequest,
    pipeline: CapturePipeline = Depends(get_pipeline),
    scheduler: Optional[EnhancementScheduler] = Depends(get_scheduler),
    store: EnhancementStore = Depends(get_enhancement_store),
    session_factory=Depends(get_session_factory),
):
    """Parse a capture. Low-confidence results are queued for background enhancement."""
    capture_id = str(uuid.uuid4())
    try:
        result = pipeline.parse(request.text, request.today)
    except Exception as e:
        logger.error(f"Failed to parse capture: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to parse capture")

    if not pipeline.should_enhance(result):
        return _build_response(capture_id, result, pipeline.config)

    if request.enhance:
        try:
            enhanced = pipeline.enhance_result(request.text, result, request.today)
        except Exception as e:
            logger.warning(f"Inline enhancement failed: {type(e).__name__}: {str(e)}")
            enhanced = None
        return _build_response(capture_id, enhanced or result, pipeline.config)

    pending = False
    if scheduler is not None:
        pending = _schedule_enhancement(
            scheduler, session_factory, pipeline, request, result, lambda enhanced: store.put(capture_id, enhanced)
        )
    return _build_response(capture_id, result, pipeline.config, enhancement_pending=pending)


def _schedule_enhancement(scheduler, session_factory, pipeline, request, result, callback) -> bool:
    # The request session closes with the response, so the background run gets its own
    db = session_factory()
    background = CapturePipeline(
        goal_matcher=GoalMatcher(GoalRepository(db), TaskRepository(db)),
        llm_client=pipeline.llm_client,
        config=pipeline.config,
    )
    try:
        future = scheduler.submit(background, request.text, result, callback, request.today)
    except SchedulerStoppedError:
        logger.warning("Enhancement scheduler not running, returning rule-based result only")
        future = None
    if future is None:
        db.close()
        return False
    future.add_done_callback(lambda _: db.close())
    return True


@app.get("/parse/{capture_id}/enhanced", response_model=ParsedResult)
def get_enhanced(capture_id: str, store: EnhancementStore = Depends(get_enhancement_store)):
    """Enhanced result for a capture, once the background step has produced one."""
    enhanced = store.get(capture_id)
    if enhanced is None:
        raise HTTPException(status_code=404, detail="No enhanced result available")
    return enhanced


@app.post("/clarify/analyze", response_model=SlotAnalysis)
def clarify_analyze(request: AnalyzeRequest):
    return analyze_slots(request.result)


@app.post("/clarify/questions", response_model=ClarificationResult)
def clarify_questions(
    request: QuestionsRequest,
    llm_client=Depends(get_llm_client),
    config: ParserConfig = Depends(get_config),
):
    """Questions for the unmet mandatory slots."""
    analysis = analyze_slots(request.result)
    client = llm_client if config.enable_llm else None
    return generate_questions(request.text, request.result, analysis, client, timeout=config.llm_timeout_sec)


@app.post("/clarify/merge", response_model=ParseResponse)
def clarify_merge(request: MergeRequest, config: ParserConfig = Depends(get_config)):
    """Merge clarification answers into a parsed result."""
    try:
        merged = merge_answers(request.result, request.answers, request.today)
    except ClarificationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _build_response(str(uuid.uuid4()), merged, config)


@app.post("/tasks", response_model=Task, status_code=201)
def create_task(request: CreateTaskRequest, db: Session = Depends(get_db)):
    """Create a task from a parsed capture."""
    try:
        return create_task_from_capture(request.result, TaskRepository(db), request.source_text)
    except IncompleteSuggestionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create task: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create task")


@app.get("/deep-prompts/{aspect}", response_model=List[DeepPromptQuestion])
def deep_prompts(aspect: str):
    """Sub-activity questions for an aspect."""
    try:
        life_aspect = LifeAspect(aspect)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown aspect: {aspect}")
    return get_questions_for_aspect(life_aspect)


@app.post("/breakdown", response_model=TaskBreakdown)
def breakdown(request: BreakdownRequest):
    """Generate a trigger/steps/completion plan."""
    options = dict(
        time=request.time,
        location=request.location,
        time_preference=request.time_preference,
        total_duration=request.total_duration,
    )
    if request.answers:
        return generate_breakdown_from_answers(request.aspect, request.answers, **options)
    return generate_breakdown(request.aspect, **options)
