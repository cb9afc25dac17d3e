"""Capture parsing pipeline.

parse() is synchronous: the extractors fan out over a thread pool, the
slots are assembled, scored and matched against goals, and a breakdown is
attached. enhance() is invoked separately and reports back through a
callback, at most once.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import date
from functools import partial
from typing import Callable, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from inboxparser.engine.breakdown import generate_breakdown
from inboxparser.engine.confidence import rescore
from inboxparser.engine.enhancement import build_extraction_prompt, merge_extraction, parse_extraction_response
from inboxparser.engine.goal_matcher import GoalMatcher, MatchInput, MatchResult
from inboxparser.engine.intent import classify_intent, infer_activity_description
from inboxparser.extractors.date_extractor import extract_date
from inboxparser.extractors.priority_extractor import extract_priority, remove_priority_from_text
from inboxparser.extractors.regional import extract_location, get_today, normalize_text
from inboxparser.extractors.time_extractor import extract_duration, extract_time, infer_time_preference_from_text
from inboxparser.extractors.who_extractor import find_companion
from inboxparser.models.constants import (
    ASPECT_DEFAULT_DURATIONS,
    AUTO_FILL_THRESHOLD,
    DEFAULT_AMBIGUITY_DISCOUNT,
    DEFAULT_AMBIGUITY_MARGIN,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_LLM_TIMEOUT_MS,
    INFERRED_DURATION_CONFIDENCE,
    PARSER_VERSION,
)
from inboxparser.models.enums import ConfidenceLevel, ParsingMethod
from inboxparser.models.parsed import (
    AspectSlot,
    IntSlot,
    ParsedResult,
    PreferenceSlot,
    RawExtractions,
    TextSlot,
    WhenSlot,
    WhoSlot,
)
from inboxparser.models.task import Task
from inboxparser.models.task_factory import create_task_from_suggestion

load_dotenv()

logger = logging.getLogger(__name__)

INFERRED_PREFERENCE_CONFIDENCE = 0.60
NO_INTENT_ACTIVITY_CONFIDENCE = 0.60
MAX_ACTIVITY_CONFIDENCE = 0.95

EnhancementCallback = Callable[[ParsedResult], None]


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class ParserConfig(BaseModel):
    """Pipeline configuration."""

    enable_llm: bool = True
    llm_timeout_ms: int = Field(DEFAULT_LLM_TIMEOUT_MS, gt=0)
    min_confidence_for_auto_fill: float = Field(AUTO_FILL_THRESHOLD, ge=0.0, le=1.0)
    debounce_ms: int = Field(DEFAULT_DEBOUNCE_MS, ge=0)
    ambiguity_margin: float = Field(DEFAULT_AMBIGUITY_MARGIN, ge=0.0, le=1.0)
    ambiguity_discount: float = Field(DEFAULT_AMBIGUITY_DISCOUNT, ge=0.0, le=1.0)

    @classmethod
    def from_env(cls) -> "ParserConfig":
        """Read INBOX_* environment variables, falling back to defaults."""
        return cls(
            enable_llm=_env_bool("INBOX_ENABLE_LLM", True),
            llm_timeout_ms=int(os.getenv("INBOX_LLM_TIMEOUT_MS", str(DEFAULT_LLM_TIMEOUT_MS))),
            min_confidence_for_auto_fill=float(os.getenv("INBOX_AUTO_FILL_THRESHOLD", str(AUTO_FILL_THRESHOLD))),
            debounce_ms=int(os.getenv("INBOX_DEBOUNCE_MS", str(DEFAULT_DEBOUNCE_MS))),
        )

    @property
    def llm_timeout_sec(self) -> float:
        return self.llm_timeout_ms / 1000


class CapturePipeline:
    """Turns capture text into a scored ParsedResult.

    Args:
        goal_matcher: Optional GoalMatcher; without one no goals are matched
        llm_client: Optional client with check_connection() and complete(prompt, timeout)
        config: ParserConfig (defaults if omitted)
    """

    def __init__(self, goal_matcher: Optional[GoalMatcher] = None, llm_client=None, config: Optional[ParserConfig] = None):
        self.goal_matcher = goal_matcher
        self.llm_client = llm_client
        self.config = config or ParserConfig()

    def parse(self, text: str, today: Optional[date] = None) -> ParsedResult:
        """Rule-based parse. Always returns a usable result, possibly empty."""
        started = time.perf_counter()
        today = today or get_today()
        normalized = normalize_text(text or "")

        extractors = {
            "date": partial(extract_date, normalized, today),
            "time": partial(extract_time, normalized),
            "location": partial(extract_location, normalized),
            "intent": partial(
                classify_intent,
                normalized,
                ambiguity_margin=self.config.ambiguity_margin,
                ambiguity_discount=self.config.ambiguity_discount,
            ),
            "duration": partial(extract_duration, normalized),
            "who": partial(find_companion, normalized),
            "priority": partial(extract_priority, normalized),
        }
        with ThreadPoolExecutor(max_workers=len(extractors), thread_name_prefix="extract") as executor:
            futures = {name: executor.submit(fn) for name, fn in extractors.items()}
            found = {name: future.result() for name, future in futures.items()}

        raw = RawExtractions(tokens=normalized.split(), matched_patterns=self._matched_patterns(found))
        empty = ParsedResult(raw_extractions=raw, parser_version=PARSER_VERSION)

        # A lone unrecognised token is noise; longer text still names an activity
        if not any(found.values()) and len(raw.tokens) < 2:
            logger.debug("No signal found in capture")
            result = rescore(empty, today)
            return result.model_copy(update={"processing_time_ms": self._elapsed_ms(started)})

        intent = found["intent"]
        slots = {
            "what": self._build_what(normalized, intent, found["priority"]),
            "when": self._build_when(found["date"], found["time"], normalized),
            "where": self._build_where(found["location"]),
            "who": self._build_who(found["who"]),
            "duration": self._build_duration(found["duration"], intent),
            "priority": self._build_priority(found["priority"]),
            "intent": self._build_intent(intent),
        }
        result = rescore(empty, today, **slots)

        matched = self._match_goals(result, today)
        result = rescore(result, today, goal_match=matched.best_match, alternative_goals=matched.alternatives)
        result = result.model_copy(update={"suggested_breakdown": self._breakdown_for(result)})

        elapsed = self._elapsed_ms(started)
        logger.debug(
            f"Parsed capture: aspect={intent.aspect.value if intent else None} "
            f"confidence={result.overall_confidence} in {elapsed:.1f}ms"
        )
        return result.model_copy(update={"processing_time_ms": elapsed})

    def should_enhance(self, result: ParsedResult) -> bool:
        """Enhancement is worth trying only when enabled and the rule result is not already auto-fillable."""
        return (
            self.config.enable_llm
            and self.llm_client is not None
            and result.overall_confidence < self.config.min_confidence_for_auto_fill
        )

    def enhance(
        self,
        text: str,
        prior: ParsedResult,
        on_enhanced: EnhancementCallback,
        today: Optional[date] = None,
    ) -> None:
        """Best-effort language-model enhancement.

        Calls on_enhanced at most once, and only when a slot was improved.
        Every failure is logged and swallowed; the prior result stands.
        """
        try:
            enhanced = self.enhance_result(text, prior, today)
        except Exception as e:
            logger.warning(f"Enhancement failed: {type(e).__name__}: {str(e)}")
            return
        if enhanced is not None:
            on_enhanced(enhanced)

    def enhance_result(self, text: str, prior: ParsedResult, today: Optional[date] = None) -> Optional[ParsedResult]:
        """Synchronous core of enhance(). None when nothing could be improved."""
        if not self.config.enable_llm or self.llm_client is None:
            return None
        if not self.llm_client.check_connection():
            logger.debug("Language-model service unreachable, skipping enhancement")
            return None

        today = today or get_today()
        prompt = build_extraction_prompt(normalize_text(text or ""), prior, today)
        response = self._complete_within_timeout(prompt)
        extraction = parse_extraction_response(response)
        if extraction is None:
            return None

        updates, overridden = merge_extraction(prior, extraction)
        if not overridden:
            logger.debug("Language model did not beat any rule-based slot")
            return None

        enhanced = rescore(prior, today, parsing_method=ParsingMethod.HYBRID, **updates)
        # The aspect may have changed
        matched = self._match_goals(enhanced, today)
        enhanced = rescore(enhanced, today, goal_match=matched.best_match, alternative_goals=matched.alternatives)
        breakdown = self._breakdown_for(enhanced)
        if breakdown is not None:
            enhanced = enhanced.model_copy(update={"suggested_breakdown": breakdown})
        return enhanced

    def _complete_within_timeout(self, prompt: str) -> Optional[str]:
        timeout = self.config.llm_timeout_sec
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="llm")
        try:
            future = executor.submit(self.llm_client.complete, prompt, timeout)
            return future.result(timeout=timeout)
        except FuturesTimeoutError:
            logger.info(f"Language-model call exceeded {timeout}s, keeping rule-based result")
            return None
        finally:
            executor.shutdown(wait=False)

    def _match_goals(self, result: ParsedResult, today: date) -> MatchResult:
        if self.goal_matcher is None or result.intent is None:
            return MatchResult()
        match_input = MatchInput(
            aspect=result.intent.value,
            scheduled_date=result.when.date.value if result.when and result.when.date else None,
            activity=result.what.value if result.what else None,
            location=result.where.value if result.where else None,
        )
        return self.goal_matcher.match(match_input, today)

    @staticmethod
    def _breakdown_for(result: ParsedResult):
        if result.intent is None or result.confidence_level == ConfidenceLevel.LOW:
            return None
        when = result.when
        return generate_breakdown(
            result.intent.value,
            time=when.time.value if when and when.time else None,
            location=result.where.value if result.where else None,
            time_preference=when.time_preference.value if when and when.time_preference else None,
            total_duration=result.duration.value if result.duration else None,
        )

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 3)

    @staticmethod
    def _matched_patterns(found: dict) -> List[str]:
        patterns = []
        if found["date"]:
            patterns.append(f"date:{found['date'].matched_text}")
        if found["time"]:
            patterns.append(f"time:{found['time'].matched_text}")
        if found["location"]:
            patterns.append(f"location:{found['location'].raw_match}")
        if found["intent"]:
            patterns.append(f"intent:{found['intent'].aspect.value}")
        if found["duration"]:
            patterns.append(f"duration:{found['duration'].matched_text}")
        if found["who"]:
            patterns.append(f"who:{found['who'].matched_text}")
        if found["priority"]:
            patterns.append(f"priority:{found['priority'].matched_text}")
        return patterns

    @staticmethod
    def _build_what(text: str, intent, priority) -> Optional[TextSlot]:
        cleaned = remove_priority_from_text(text) if priority else text
        activity = infer_activity_description(cleaned, intent)
        if len(activity) < 2:
            return None
        confidence = min(intent.confidence + 0.1, MAX_ACTIVITY_CONFIDENCE) if intent else NO_INTENT_ACTIVITY_CONFIDENCE
        return TextSlot(value=activity, raw_match=cleaned, confidence=round(confidence, 4))

    @staticmethod
    def _build_when(date_match, time_match, text: str) -> Optional[WhenSlot]:
        if date_match is None and time_match is None:
            preference = infer_time_preference_from_text(text)
            if preference is None:
                return None
            return WhenSlot(time_preference=PreferenceSlot(value=preference, confidence=INFERRED_PREFERENCE_CONFIDENCE))

        return WhenSlot(
            date=TextSlot(value=date_match.date, raw_match=date_match.matched_text, confidence=date_match.confidence)
            if date_match else None,
            time=TextSlot(value=time_match.time, raw_match=time_match.matched_text, confidence=time_match.confidence)
            if time_match else None,
            time_preference=PreferenceSlot(
                value=time_match.time_preference, raw_match=time_match.matched_text, confidence=time_match.confidence
            ) if time_match else None,
            is_relative=date_match.is_relative if date_match else False,
        )

    @staticmethod
    def _build_where(location) -> Optional[TextSlot]:
        if location is None:
            return None
        return TextSlot(value=location.location, raw_match=location.raw_match, confidence=location.confidence)

    @staticmethod
    def _build_who(companion) -> WhoSlot:
        if companion is None:
            return WhoSlot(value="solo", confidence=1.0)
        return WhoSlot(
            value=companion.who,
            raw_match=companion.matched_text,
            confidence=companion.confidence,
            who_type=companion.who_type,
        )

    @staticmethod
    def _build_duration(duration, intent) -> Optional[IntSlot]:
        if duration is not None:
            return IntSlot(value=duration.minutes, raw_match=duration.matched_text, confidence=duration.confidence)
        if intent is not None:
            return IntSlot(value=ASPECT_DEFAULT_DURATIONS[intent.aspect], confidence=INFERRED_DURATION_CONFIDENCE)
        return None

    @staticmethod
    def _build_priority(priority) -> Optional[IntSlot]:
        if priority is None:
            return None
        return IntSlot(value=priority.priority, raw_match=priority.matched_text, confidence=priority.confidence)

    @staticmethod
    def _build_intent(intent) -> Optional[AspectSlot]:
        if intent is None:
            return None
        return AspectSlot(value=intent.aspect, raw_match=", ".join(intent.matched_keywords), confidence=intent.confidence)


def create_task_from_capture(
    result: ParsedResult,
    task_repository,
    source_text: Optional[str] = None,
) -> Task:
    """Persist a task built from a parsed capture, linked to the best-matching weekly goal.

    Raises:
        IncompleteSuggestionError: If the capture has no usable title or aspect
    """
    task = create_task_from_suggestion(
        result.suggested_task,
        source_text=source_text,
        parser_version=result.parser_version,
        breakdown=result.suggested_breakdown,
    )
    created = task_repository.create(task)
    logger.info(f"Created task {created.id} from capture (goal={created.weekly_goal_id})")
    return created
