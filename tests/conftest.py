"""
Pytest fixtures: a deterministic text service and a fake Mistral client.
"""

import json
from types import SimpleNamespace
from typing import List, Optional

import pytest

from app.config import Settings
from app.session import LessonSession

PARAGRAPH = (
    "We propose to streamline our onboarding process in order to cut costs. "
    "This plan will help us stay ahead of the curve and get the ball rolling next quarter."
)


def grading_json(
    score: int = 85,
    *,
    words: Optional[List[str]] = None,
    wrong: Optional[dict] = None,
    axes: Optional[dict] = None,
) -> str:
    words = words if words is not None else ["We", "propose", "a", "plan."]
    wrong = wrong or {}
    axes = axes if axes is not None else {
        "Formality": 4, "Clarity": 4, "Conciseness": 3, "Grammar": 5, "Vocabulary": 4,
    }
    return json.dumps({
        "score": score,
        "feedback": {
            "strengths": ["Clear structure.", "Good collocations."],
            "improvements": ["Watch article use.", "Keep the formal register."],
        },
        "diffs": [
            {"word": w, "isCorrect": w not in wrong, "errorType": wrong.get(w, "")}
            for w in words
        ],
        "proficiencyChartData": axes,
    })


class FakeTextService:
    """Returns a fixed paragraph and queued grading replies."""

    def __init__(self, paragraph: str = PARAGRAPH, gradings: Optional[list] = None):
        self.paragraph = paragraph
        self.gradings = list(gradings or [])
        self.generate_calls = []
        self.grading_calls = []

    def queue(self, *replies):
        self.gradings.extend(replies)

    async def generate_sample(self, level: str, topic: str) -> str:
        self.generate_calls.append((level, topic))
        return self.paragraph

    async def perform_grading(self, reference_text: str, user_html: str) -> str:
        self.grading_calls.append((reference_text, user_html))
        reply = self.gradings.pop(0) if self.gradings else grading_json()
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeChat:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    async def complete_async(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeMistral:
    def __init__(self, *replies):
        self.chat = FakeChat(replies)


@pytest.fixture
def fake_service():
    return FakeTextService()


@pytest.fixture
def session(fake_service):
    return LessonSession(fake_service, level="B1", topic="business-proposals")


@pytest.fixture
def settings():
    return Settings(mistral_api_key="test-key", max_retries=0, retry_base_delay=0.0, retry_max_delay=0.0)
