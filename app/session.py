# app/session.py
from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from agents.text_service import GENERATION_ERROR_TEXT, TextService
from app.catalog import DEFAULT_LEVEL, DEFAULT_TOPIC, TIER_PROGRESSION, lesson_title
from app.errors import LessonStateError
from app.grading import GradingCoordinator, render_graded_html
from app.learning.masking import mask
from app.logging_config import get_logger
from models import Feedback, Lesson

logger = get_logger(__name__)

EMPTY_EDITOR = "<p><br></p>"
LOADING_TEXT = "Loading lesson..."


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


class LessonState(str, Enum):
    NO_LESSON = "no_lesson"
    LOADING = "loading"
    READY = "ready"
    GRADING = "grading"
    GRADED = "graded"
    COMPLETED = "completed"


class LessonSession:
    """
    One learner working through one lesson.

    NO_LESSON -> LOADING -> READY -> GRADING -> GRADED -> READY | COMPLETED

    `start_lesson` resets everything and may be called again from any state
    except while a model call is in flight (LOADING / GRADING).
    """

    def __init__(
        self,
        service: TextService,
        level: str = DEFAULT_LEVEL.value,
        topic: str = DEFAULT_TOPIC,
        coordinator: Optional[GradingCoordinator] = None,
    ):
        self.session_id = new_id("s")
        self.service = service
        self.coordinator = coordinator or GradingCoordinator(service)
        self.level = level
        self.topic = topic

        self.state = LessonState.NO_LESSON
        self.lesson: Optional[Lesson] = None
        self.current_tier_index = 0
        self.completed = False
        self.user_text = EMPTY_EDITOR
        self.feedback = Feedback.baseline()
        self.graded_html = ""
        self.study_pending = False

    # -----------------------
    # Derived
    # -----------------------
    @property
    def tier_count(self) -> int:
        return len(self.lesson.tiers) if self.lesson else 0

    @property
    def tier_number(self) -> int:
        return self.current_tier_index + 1

    @property
    def is_last_tier(self) -> bool:
        return self.lesson is not None and self.current_tier_index == self.tier_count - 1

    @property
    def current_masking_percentage(self) -> int:
        if self.lesson is None:
            return 0
        return self.lesson.tiers[self.current_tier_index].masking_percentage

    @property
    def masked_text(self) -> str:
        if self.lesson is None:
            return LOADING_TEXT
        return mask(self.lesson.reference_text, self.current_masking_percentage)

    @property
    def lesson_title(self) -> str:
        return lesson_title(self.topic)

    @property
    def is_busy(self) -> bool:
        return self.state in (LessonState.LOADING, LessonState.GRADING)

    # -----------------------
    # Transitions
    # -----------------------
    def _log_extra(self) -> dict:
        return {"session_id": self.session_id}

    def _require(self, action: str, *allowed: LessonState) -> None:
        if self.state not in allowed:
            raise LessonStateError(action, self.state.value)

    def _clear_attempt(self) -> None:
        self.feedback = Feedback.baseline()
        self.graded_html = ""
        self.user_text = EMPTY_EDITOR

    async def start_lesson(self, level: Optional[str] = None, topic: Optional[str] = None) -> Lesson:
        if self.is_busy:
            raise LessonStateError("start a lesson", self.state.value, "a request is already running")

        if level is not None:
            self.level = level
        if topic is not None:
            self.topic = topic

        self._clear_attempt()
        self.completed = False
        self.current_tier_index = 0
        self.lesson = None
        self.study_pending = False
        self.state = LessonState.LOADING
        logger.info("Generating lesson (level=%s, topic=%s)", self.level, self.topic, extra=self._log_extra())

        try:
            text = await self.service.generate_sample(self.level, self.topic)
        except BaseException:
            self.state = LessonState.NO_LESSON
            raise

        self.lesson = Lesson(reference_text=text or GENERATION_ERROR_TEXT, tiers=TIER_PROGRESSION)
        self.state = LessonState.READY
        self.study_pending = True
        return self.lesson

    def begin_writing(self) -> None:
        self.study_pending = False

    async def submit(self, user_text: str) -> Feedback:
        if self.state == LessonState.GRADING:
            raise LessonStateError("submit", self.state.value, "grading already in progress")
        self._require("submit", LessonState.READY)

        self.user_text = user_text
        self.state = LessonState.GRADING
        try:
            feedback = await self.coordinator.grade(
                self.lesson.reference_text, user_text, session_id=self.session_id
            )
        except BaseException:
            self.state = LessonState.READY
            raise

        self.feedback = feedback
        self.graded_html = render_graded_html(feedback.word_diffs)
        self.study_pending = False

        if self.coordinator.is_complete(feedback.score, self.current_tier_index, self.tier_count):
            self.completed = True
        self.state = LessonState.COMPLETED if self.completed else LessonState.GRADED
        logger.info(
            "Tier %d/%d graded: score=%d completed=%s",
            self.tier_number, self.tier_count, feedback.score, self.completed,
            extra=self._log_extra(),
        )
        return feedback

    def retry(self) -> None:
        self._require("retry", LessonState.GRADED)
        self._clear_attempt()
        self.state = LessonState.READY

    def advance_tier(self) -> None:
        self._require("advance to the next tier", LessonState.GRADED)
        if self.is_last_tier:
            raise LessonStateError("advance to the next tier", self.state.value, "already at the last tier")

        self.current_tier_index += 1
        self._clear_attempt()
        self.state = LessonState.READY
        logger.debug("Moved to tier %d/%d", self.tier_number, self.tier_count, extra=self._log_extra())
