import asyncio

import pytest

from agents.text_service import GENERATION_ERROR_TEXT
from app.errors import LessonStateError
from app.session import EMPTY_EDITOR, LOADING_TEXT, LessonSession, LessonState

from conftest import PARAGRAPH, FakeTextService, grading_json


async def _graded(session, score=85):
    session.service.queue(grading_json(score))
    await session.submit("<p>attempt</p>")


class TestStartLesson:
    def test_initial_state(self, session):
        assert session.state == LessonState.NO_LESSON
        assert session.lesson is None
        assert session.current_masking_percentage == 0
        assert session.masked_text == LOADING_TEXT
        assert session.lesson_title == "Business: Strategic Proposals"
        assert session.session_id.startswith("s_")

    @pytest.mark.asyncio
    async def test_start_builds_three_tier_lesson(self, session, fake_service):
        lesson = await session.start_lesson()

        assert fake_service.generate_calls == [("B1", "business-proposals")]
        assert session.state == LessonState.READY
        assert lesson.reference_text == PARAGRAPH
        assert [t.masking_percentage for t in lesson.tiers] == [20, 50, 100]
        assert session.current_tier_index == 0
        assert session.current_masking_percentage == 20
        assert session.study_pending is True
        assert "_____" in session.masked_text

    @pytest.mark.asyncio
    async def test_begin_writing_clears_study_flag(self, session):
        await session.start_lesson()
        session.begin_writing()
        assert session.study_pending is False

    @pytest.mark.asyncio
    async def test_start_is_a_full_reset(self, session):
        await session.start_lesson()
        await _graded(session)
        session.advance_tier()
        await _graded(session)
        session.advance_tier()
        await _graded(session, 90)
        assert session.state == LessonState.COMPLETED

        old_lesson = session.lesson
        await session.start_lesson(topic="academic-essays")

        assert session.state == LessonState.READY
        assert session.lesson is not old_lesson
        assert session.current_tier_index == 0
        assert session.completed is False
        assert session.feedback.score == 0
        assert session.graded_html == ""
        assert session.user_text == EMPTY_EDITOR
        assert session.lesson_title == "Academic: Essays"

    @pytest.mark.asyncio
    async def test_generation_sentinel_still_gives_a_lesson(self):
        session = LessonSession(FakeTextService(paragraph=GENERATION_ERROR_TEXT))
        await session.start_lesson()
        assert session.state == LessonState.READY
        assert session.lesson.reference_text == GENERATION_ERROR_TEXT

    @pytest.mark.asyncio
    async def test_empty_paragraph_falls_back_to_sentinel(self):
        session = LessonSession(FakeTextService(paragraph=""))
        await session.start_lesson()
        assert session.lesson.reference_text == GENERATION_ERROR_TEXT

    @pytest.mark.asyncio
    async def test_loading_is_left_when_generation_raises(self):
        class Broken(FakeTextService):
            async def generate_sample(self, level, topic):
                raise RuntimeError("boom")

        session = LessonSession(Broken())
        with pytest.raises(RuntimeError):
            await session.start_lesson()
        assert session.state == LessonState.NO_LESSON


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_without_lesson_is_rejected(self, session):
        with pytest.raises(LessonStateError):
            await session.submit("<p>hi</p>")
        assert session.state == LessonState.NO_LESSON

    @pytest.mark.asyncio
    async def test_submit_grades_and_stores_feedback(self, session, fake_service):
        await session.start_lesson()
        fake_service.queue(grading_json(72, words=["We", "propse"], wrong={"propse": "Spelling"}))

        feedback = await session.submit("<p>We propse</p>")

        assert fake_service.grading_calls == [(PARAGRAPH, "<p>We propse</p>")]
        assert session.state == LessonState.GRADED
        assert session.feedback is feedback
        assert feedback.score == 72
        assert session.user_text == "<p>We propse</p>"
        assert 'title="Spelling"' in session.graded_html
        assert session.completed is False

    @pytest.mark.asyncio
    async def test_second_submit_while_graded_is_rejected(self, session):
        await session.start_lesson()
        await _graded(session)
        with pytest.raises(LessonStateError):
            await session.submit("<p>again</p>")

    @pytest.mark.asyncio
    async def test_reentrant_submit_is_rejected(self):
        gate = asyncio.Event()

        class Slow(FakeTextService):
            async def perform_grading(self, reference_text, user_html):
                await gate.wait()
                return await super().perform_grading(reference_text, user_html)

        service = Slow()
        session = LessonSession(service)
        await session.start_lesson()

        first = asyncio.create_task(session.submit("<p>one</p>"))
        await asyncio.sleep(0)
        assert session.state == LessonState.GRADING

        with pytest.raises(LessonStateError):
            await session.submit("<p>two</p>")
        with pytest.raises(LessonStateError):
            await session.start_lesson()

        gate.set()
        await first
        assert session.state == LessonState.GRADED
        assert len(service.grading_calls) == 1

    @pytest.mark.asyncio
    async def test_cancelled_grading_returns_to_ready(self):
        class Hang(FakeTextService):
            async def perform_grading(self, reference_text, user_html):
                await asyncio.Event().wait()

        session = LessonSession(Hang())
        await session.start_lesson()
        task = asyncio.create_task(session.submit("<p>x</p>"))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert session.state == LessonState.READY


class TestCompletion:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("score,expected", [(80, True), (79, False), (100, True)])
    async def test_last_tier_threshold(self, session, score, expected):
        await session.start_lesson()
        await _graded(session)
        session.advance_tier()
        await _graded(session)
        session.advance_tier()
        await _graded(session, score)

        assert session.is_last_tier
        assert session.completed is expected
        assert session.state == (LessonState.COMPLETED if expected else LessonState.GRADED)

    @pytest.mark.asyncio
    async def test_perfect_score_before_last_tier_does_not_complete(self, session):
        await session.start_lesson()
        await _graded(session, 100)
        assert session.completed is False
        assert session.state == LessonState.GRADED

    @pytest.mark.asyncio
    async def test_completed_is_terminal(self, session):
        await session.start_lesson()
        await _graded(session)
        session.advance_tier()
        await _graded(session)
        session.advance_tier()
        await _graded(session, 80)

        with pytest.raises(LessonStateError):
            session.retry()
        with pytest.raises(LessonStateError):
            session.advance_tier()
        with pytest.raises(LessonStateError):
            await session.submit("<p>more</p>")
        assert session.completed is True

    @pytest.mark.asyncio
    async def test_grading_failure_keeps_completion_state(self, session, fake_service):
        await session.start_lesson()
        await _graded(session)
        session.advance_tier()
        await _graded(session)
        session.advance_tier()
        await _graded(session, 60)
        session.retry()

        fake_service.queue(RuntimeError("down"))
        feedback = await session.submit("<p>x</p>")

        assert feedback.score == 0
        assert len(feedback.improvements) == 1
        assert len(feedback.word_diffs) == 1
        assert session.completed is False
        assert session.state == LessonState.GRADED


class TestTierMoves:
    @pytest.mark.asyncio
    async def test_advance_tier(self, session):
        await session.start_lesson()
        await _graded(session, 60)
        session.advance_tier()

        assert session.state == LessonState.READY
        assert session.current_tier_index == 1
        assert session.current_masking_percentage == 50
        assert session.feedback.score == 0
        assert session.graded_html == ""
        assert session.user_text == EMPTY_EDITOR

    @pytest.mark.asyncio
    async def test_advance_at_last_tier_leaves_state_unchanged(self, session):
        await session.start_lesson()
        await _graded(session)
        session.advance_tier()
        await _graded(session)
        session.advance_tier()
        await _graded(session, 50)

        feedback = session.feedback
        with pytest.raises(LessonStateError):
            session.advance_tier()

        assert session.state == LessonState.GRADED
        assert session.current_tier_index == 2
        assert session.feedback is feedback
        assert session.masked_text == "Reconstruct the full text from memory."

    @pytest.mark.asyncio
    async def test_advance_requires_graded(self, session):
        await session.start_lesson()
        with pytest.raises(LessonStateError):
            session.advance_tier()
        assert session.current_tier_index == 0

    @pytest.mark.asyncio
    async def test_retry_keeps_tier(self, session):
        await session.start_lesson()
        await _graded(session, 40)
        session.advance_tier()
        await _graded(session, 40)
        session.retry()

        assert session.state == LessonState.READY
        assert session.current_tier_index == 1
        assert session.feedback.score == 0
        assert session.graded_html == ""

    @pytest.mark.asyncio
    async def test_retry_requires_graded(self, session):
        await session.start_lesson()
        with pytest.raises(LessonStateError):
            session.retry()
