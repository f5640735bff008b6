# app/views.py
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from app.learning.masking import count_masked, mask
from app.learning.radar import RadarChart, build_radar_chart
from app.learning.svg import radar_svg, score_ring_svg
from app.session import LOADING_TEXT, LessonSession, LessonState
from models import PROFICIENCY_AXES, Feedback


@lru_cache(maxsize=64)
def cached_mask(reference_text: str, percentage: int) -> Tuple[str, int]:
    return mask(reference_text, percentage), count_masked(reference_text, percentage)


@lru_cache(maxsize=64)
def cached_radar(scores: Tuple[float, ...]) -> RadarChart:
    return build_radar_chart(dict(zip(PROFICIENCY_AXES, scores)))


@lru_cache(maxsize=128)
def cached_radar_svg(scores: Tuple[float, ...]) -> str:
    return radar_svg(cached_radar(scores))


@dataclass(frozen=True)
class LessonView:
    session_id: str
    title: str
    state: LessonState
    level: str
    tier_number: int
    tier_count: int
    masking_percentage: int
    masked_text: str
    masked_word_count: int
    study_pending: bool
    user_text: str
    feedback: Feedback
    graded_html: str
    radar_svg: str
    score_ring_svg: str
    completed: bool
    can_submit: bool
    can_retry: bool
    can_advance: bool


def _axis_scores(feedback: Feedback) -> Tuple[float, ...]:
    data = feedback.proficiency.as_mapping()
    return tuple(float(data.get(axis, 0.0)) for axis in PROFICIENCY_AXES)


def build_lesson_view(session: LessonSession) -> LessonView:
    """Snapshot of everything the UI renders, recomputed from the session."""
    pct = session.current_masking_percentage
    if session.lesson is None:
        masked, n_masked = LOADING_TEXT, 0
    else:
        masked, n_masked = cached_mask(session.lesson.reference_text, pct)

    scores = _axis_scores(session.feedback)
    state = session.state

    return LessonView(
        session_id=session.session_id,
        title=session.lesson_title,
        state=state,
        level=session.level,
        tier_number=session.tier_number,
        tier_count=session.tier_count,
        masking_percentage=pct,
        masked_text=masked,
        masked_word_count=n_masked,
        study_pending=session.study_pending,
        user_text=session.user_text,
        feedback=session.feedback,
        graded_html=session.graded_html,
        radar_svg=cached_radar_svg(scores),
        score_ring_svg=score_ring_svg(session.feedback.score),
        completed=session.completed,
        can_submit=state == LessonState.READY,
        can_retry=state == LessonState.GRADED,
        can_advance=state == LessonState.GRADED and not session.is_last_tier,
    )
