import asyncio
import pytest

from marketing_planner.models.question import Question, QuestionType
from marketing_planner.questionnaire.flow import (
    FlowState,
    FlowStateError,
    QuestionFlowController,
    SubmissionError,
)
from marketing_planner.repositories.base import DraftMedium
from marketing_planner.services.draft_store import DraftStore


class MemoryMedium(DraftMedium):
    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value
        return True

    async def delete(self, key):
        return self.data.pop(key, None) is not None


def _questions():
    # Two squares: q1, q2 in square 0; q3 in square 1
    return [
        Question(id="q1", square=0, text="First?", type=QuestionType.TEXT),
        Question(id="q2", square=0, text="Second?", type=QuestionType.TEXT),
        Question(id="q3", square=1, text="Third?", type=QuestionType.TEXT),
    ]


class RecordingSubmitter:
    def __init__(self, fail_times=0):
        self.calls = []
        self.fail_times = fail_times

    async def __call__(self, answers):
        self.calls.append(dict(answers))
        if len(self.calls) <= self.fail_times:
            raise RuntimeError("upstream unavailable")
        return f"plan-{len(self.calls)}"


async def _start(submitter=None, medium=None, questions=None):
    store = DraftStore(medium or MemoryMedium())
    return await QuestionFlowController.start(
        _questions() if questions is None else questions,
        store,
        "questionnaire_draft:s1",
        submitter or RecordingSubmitter(),
    )


@pytest.mark.asyncio
async def test_start_enters_navigation_at_first_question():
    flow = await _start()
    assert flow.state == FlowState.NAVIGATING
    assert flow.current_index == 0
    assert flow.answers == {}
    assert flow.completed_squares == set()


@pytest.mark.asyncio
async def test_retreat_at_first_question_is_noop():
    flow = await _start()
    flow.retreat()
    assert flow.current_index == 0


@pytest.mark.asyncio
async def test_advance_marks_square_complete_only_when_leaving_it():
    flow = await _start()

    assert await flow.advance() is None
    assert flow.current_index == 1
    assert flow.completed_squares == set()

    assert await flow.advance() is None
    assert flow.current_index == 2
    assert flow.completed_squares == {0}

    flow.retreat()
    assert flow.current_index == 1
    # Going back does not reopen a square
    assert flow.completed_squares == {0}


@pytest.mark.asyncio
async def test_advance_on_last_question_submits_once():
    submitter = RecordingSubmitter()
    flow = await _start(submitter)
    flow.record_answer("q1", "hello")
    await flow.advance()
    await flow.advance()

    plan_id = await flow.advance()
    assert plan_id == "plan-1"
    assert flow.state == FlowState.SUBMITTING
    assert flow.artifact_id == "plan-1"
    assert flow.completed_squares == {0, 1}
    assert submitter.calls == [{"q1": "hello"}]

    # Further advances never resubmit
    assert await flow.advance() is None
    assert len(submitter.calls) == 1


@pytest.mark.asyncio
async def test_concurrent_advance_on_last_question_submits_once():
    gate = asyncio.Event()
    calls = []

    async def slow_submitter(answers):
        calls.append(answers)
        await gate.wait()
        return "plan-x"

    flow = await _start(slow_submitter)
    flow.current_index = 2

    first = asyncio.create_task(flow.advance())
    second = asyncio.create_task(flow.advance())
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(first, second)

    assert results == ["plan-x", None]
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_record_answer_after_submission_is_rejected():
    flow = await _start()
    flow.current_index = 2
    await flow.advance()

    with pytest.raises(FlowStateError):
        flow.record_answer("q1", "late")
    assert "q1" not in flow.answers


@pytest.mark.asyncio
async def test_failed_submission_can_be_retried():
    submitter = RecordingSubmitter(fail_times=1)
    flow = await _start(submitter)
    flow.record_answer("q3", "answer")
    flow.current_index = 2

    with pytest.raises(SubmissionError):
        await flow.advance()
    assert flow.state == FlowState.FAILED
    assert flow.last_error == "upstream unavailable"
    assert flow.answers == {"q3": "answer"}

    # Nothing happens while failed
    assert await flow.advance() is None
    assert len(submitter.calls) == 1

    flow.retry()
    assert flow.state == FlowState.NAVIGATING
    assert flow.current_index == 2

    plan_id = await flow.advance()
    assert plan_id == "plan-2"
    assert flow.last_error is None
    assert len(submitter.calls) == 2


@pytest.mark.asyncio
async def test_retry_outside_failed_state_raises():
    flow = await _start()
    with pytest.raises(FlowStateError):
        flow.retry()


@pytest.mark.asyncio
async def test_submission_clears_the_draft():
    medium = MemoryMedium()
    flow = await _start(medium=medium)
    flow.record_answer("q1", "x")
    await flow.flush()
    assert "questionnaire_draft:s1" in medium.data

    flow.current_index = 2
    await flow.advance()
    assert "questionnaire_draft:s1" not in medium.data


@pytest.mark.asyncio
async def test_restart_discards_answers_and_progress():
    medium = MemoryMedium()
    flow = await _start(medium=medium)
    flow.record_answer("q1", "x")
    await flow.advance()
    await flow.advance()

    flow.restart()
    await flow.flush()

    assert flow.current_index == 0
    assert flow.answers == {}
    assert flow.completed_squares == set()
    assert medium.data["questionnaire_draft:s1"] == "{}"


@pytest.mark.asyncio
async def test_empty_sequence_never_submits():
    submitter = RecordingSubmitter()
    flow = await _start(submitter, questions=[])
    assert flow.current_question() is None
    assert await flow.advance() is None
    assert submitter.calls == []
    assert flow.snapshot()["current_question"] is None


@pytest.mark.asyncio
async def test_snapshot_reports_position():
    flow = await _start()
    flow.record_answer("q1", "x")
    await flow.advance()
    await flow.advance()

    view = flow.snapshot()
    assert view["state"] == "navigating"
    assert view["current_index"] == 2
    assert view["total_questions"] == 3
    assert view["current_square"] == 1
    assert view["completed_squares"] == [0]
    assert view["is_last"] is True
    assert view["is_first"] is False
    assert view["answers"] == {"q1": "x"}


@pytest.mark.asyncio
async def test_index_stays_in_bounds_under_any_walk():
    flow = await _start()
    for step in ["back", "back", "next", "next", "back", "next", "back", "back", "back", "next"]:
        if step == "next" and flow.is_last:
            continue
        if step == "next":
            await flow.advance()
        else:
            flow.retreat()
        assert 0 <= flow.current_index < len(flow.questions)
    assert flow.state == FlowState.NAVIGATING
