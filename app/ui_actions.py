# app/ui_actions.py
"""
Thin actions shared by the Streamlit app and the CLI.

Model calls are coroutines. They all run on one long-lived event loop in a
background thread, so the SDK's async HTTP client never changes loops, and
the front ends stay synchronous.
"""

import asyncio
import threading
from html import escape
from typing import Any, Coroutine, Optional, TypeVar

from agents.text_service import TextService
from app.session import EMPTY_EDITOR, LessonSession
from app.views import LessonView, build_lesson_view
from models import Feedback

T = TypeVar("T")

_loop: Optional[asyncio.AbstractEventLoop] = None
_loop_lock = threading.Lock()


def _background_loop() -> asyncio.AbstractEventLoop:
    global _loop
    with _loop_lock:
        if _loop is None:
            _loop = asyncio.new_event_loop()
            threading.Thread(target=_loop.run_forever, name="rewrite-async", daemon=True).start()
        return _loop


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run_coroutine_threadsafe(coro, _background_loop()).result()


# -----------------------
# Lesson lifecycle
# -----------------------
def action_new_lesson(service: TextService, level: str, topic: str) -> LessonSession:
    """A fresh session with its first lesson loaded. Replaces any previous one."""
    session = LessonSession(service, level=level, topic=topic)
    run_async(session.start_lesson())
    return session


def action_restart(session: LessonSession) -> LessonSession:
    run_async(session.start_lesson())
    return session


def action_begin_writing(session: LessonSession) -> None:
    session.begin_writing()


# -----------------------
# Attempts
# -----------------------
def plain_text_to_html(text: str) -> str:
    """What a rich editor would hand over: one <p> per paragraph."""
    paragraphs = [p.strip() for p in (text or "").replace("\r\n", "\n").split("\n\n")]
    paragraphs = [p for p in paragraphs if p]
    if not paragraphs:
        return EMPTY_EDITOR
    return "".join("<p>" + escape(p).replace("\n", "<br>") + "</p>" for p in paragraphs)


def action_submit(session: LessonSession, user_text: str) -> Feedback:
    return run_async(session.submit(user_text))


def action_retry(session: LessonSession) -> None:
    session.retry()


def action_next_tier(session: LessonSession) -> None:
    session.advance_tier()


# -----------------------
# Read side
# -----------------------
def action_view(session: LessonSession) -> LessonView:
    return build_lesson_view(session)


def action_study_text(session: LessonSession) -> Optional[str]:
    """The reference paragraph, or None once the lesson is at its from-memory level."""
    if session.lesson is None or session.is_last_tier or session.completed:
        return None
    return session.lesson.reference_text
