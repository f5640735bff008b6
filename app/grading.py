# app/grading.py
from html import escape
from typing import List, Optional

from agents.text_service import TextService
from app.logging_config import get_logger
from models import Feedback, GradingResponse, ProficiencyChartData, WordDiff

logger = get_logger(__name__)

PASS_SCORE = 80

GRADING_ERROR_MESSAGE = "There was an error grading your response. Please try again."


def fallback_feedback() -> Feedback:
    return Feedback(
        score=0,
        strengths=[],
        improvements=[GRADING_ERROR_MESSAGE],
        word_diffs=[WordDiff(word="Error processing response.", is_correct=False, error_type="API_ERROR")],
        proficiency=ProficiencyChartData(),
    )


def render_graded_html(word_diffs: List[WordDiff]) -> str:
    """
    Rebuild the learner's text from the per-word diffs.

    A word carrying a newline starts a new paragraph. Wrong words become a
    <span class="diff-error"> whose title is the error type.
    """
    html = "<p>"
    for diff in word_diffs:
        if "\n" in diff.word:
            word = diff.word.replace("\n", "", 1)
            html += f"</p><p>{escape(word)} "
        elif diff.is_correct:
            html += f"{escape(diff.word)} "
        else:
            html += (
                f'<span class="diff-error" title="{escape(diff.error_type)}">'
                f"{escape(diff.word)}</span> "
            )
    return html + "</p>"


class GradingCoordinator:
    def __init__(self, service: TextService, pass_score: int = PASS_SCORE):
        self.service = service
        self.pass_score = pass_score

    async def grade(self, reference_text: str, user_text: str, *, session_id: Optional[str] = None) -> Feedback:
        """One grading round-trip. Failures come back as `fallback_feedback()`."""
        log_extra = {"session_id": session_id or "-"}
        try:
            raw = await self.service.perform_grading(reference_text, user_text)
            response = GradingResponse.model_validate_json(raw)
        except Exception:
            logger.exception("Error performing semantic grading", extra=log_extra)
            return fallback_feedback()

        logger.info("Graded submission: score=%d words=%d", response.score, len(response.diffs), extra=log_extra)
        return response.to_feedback()

    def is_complete(self, score: int, tier_index: int, tier_count: int) -> bool:
        return score >= self.pass_score and tier_index == tier_count - 1
