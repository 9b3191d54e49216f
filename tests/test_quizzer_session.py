from __future__ import annotations

import logging

import pytest

from study_quiz.quizzer import (
    InvalidOptionError,
    InvalidQuizError,
    NoAnswerSelectedError,
    QuestionBank,
    Quiz,
    QuizError,
    QuizNotFoundError,
    QuizSession,
    Score,
    SessionFinishedError,
    SessionNotFinishedError,
    SessionNotStartedError,
    SessionState,
)


def answer_all(session: QuizSession, answers: list[int]) -> None:
    for option in answers:
        session.select_answer(option)
        session.advance()


def test_new_session_is_idle() -> None:
    session = QuizSession()

    assert session.state is SessionState.IDLE
    assert session.quiz is None
    assert session.pending_answer is None
    assert session.recorded_answers == ()
    assert session.finished is False


def test_start_enters_answering(two_question_quiz: Quiz) -> None:
    session = QuizSession()

    session.start(two_question_quiz)

    assert session.state is SessionState.ANSWERING
    assert session.quiz is two_question_quiz
    assert session.current_index == 0
    assert session.pending_answer is None
    assert session.recorded_answers == ()
    assert session.current_question() is two_question_quiz.questions[0]


def test_concrete_scenario_half_score(two_question_quiz: Quiz) -> None:
    session = QuizSession()
    session.start(two_question_quiz)

    session.select_answer(1)
    session.advance()
    assert session.state is SessionState.ANSWERING
    assert session.current_index == 1

    session.select_answer(2)
    session.advance()
    assert session.state is SessionState.FINISHED

    score = session.score()
    assert score == (1, 2)
    assert score == Score(correct=1, total=2)
    assert score.percentage == 50


def test_advance_without_selection_leaves_state_unchanged(
    two_question_quiz: Quiz,
) -> None:
    session = QuizSession()
    session.start(two_question_quiz)

    with pytest.raises(NoAnswerSelectedError):
        session.advance()

    assert session.state is SessionState.ANSWERING
    assert session.current_index == 0
    assert session.recorded_answers == ()


def test_advance_without_selection_after_first_question(
    two_question_quiz: Quiz,
) -> None:
    session = QuizSession()
    session.start(two_question_quiz)
    answer_all(session, [0])

    with pytest.raises(NoAnswerSelectedError):
        session.advance()

    assert session.current_index == 1
    assert session.recorded_answers == (0,)


@pytest.mark.parametrize("count", [1, 2, 5])
def test_exactly_n_advances_finish(quiz_factory, count: int) -> None:
    quiz = quiz_factory([(["a", "b"], 0)] * count)
    session = QuizSession()
    session.start(quiz)

    for step in range(count):
        assert session.state is not SessionState.FINISHED
        assert len(session.recorded_answers) == session.current_index == step
        session.select_answer(1)
        session.advance()

    assert session.state is SessionState.FINISHED
    assert len(session.recorded_answers) == count
    with pytest.raises(SessionFinishedError):
        session.select_answer(0)
    with pytest.raises(SessionFinishedError):
        session.advance()
    assert len(session.recorded_answers) == count


def test_all_correct_and_all_wrong(quiz_factory) -> None:
    quiz = quiz_factory(
        [(["a", "b", "c"], 2), (["a", "b"], 0), (["a", "b", "c", "d"], 3)]
    )
    session = QuizSession()

    session.start(quiz)
    answer_all(session, [2, 0, 3])
    assert session.score() == (3, 3)
    assert session.score().percentage == 100

    session.start(quiz)
    answer_all(session, [0, 1, 1])
    assert session.score() == (0, 3)
    assert session.score().percentage == 0


def test_select_answer_last_write_wins(two_question_quiz: Quiz) -> None:
    session = QuizSession()
    session.start(two_question_quiz)

    session.select_answer(0)
    session.select_answer(1)
    assert session.state is SessionState.ANSWER_SELECTED
    assert session.pending_answer == 1
    session.advance()

    assert session.recorded_answers == (1,)
    assert session.pending_answer is None


@pytest.mark.parametrize("option", [-1, 2, 10, True, "1", None, 1.0])
def test_select_answer_rejects_out_of_range(
    two_question_quiz: Quiz, option
) -> None:
    session = QuizSession()
    session.start(two_question_quiz)

    with pytest.raises(InvalidOptionError):
        session.select_answer(option)

    assert session.state is SessionState.ANSWERING
    assert session.pending_answer is None


def test_invalid_option_keeps_previous_pending(two_question_quiz: Quiz) -> None:
    session = QuizSession()
    session.start(two_question_quiz)
    session.select_answer(0)

    with pytest.raises(InvalidOptionError):
        session.select_answer(5)

    assert session.pending_answer == 0
    assert session.state is SessionState.ANSWER_SELECTED


def test_progress_is_monotonic_and_reaches_one_only_at_finish(
    quiz_factory,
) -> None:
    quiz = quiz_factory([(["a", "b"], 0)] * 4)
    session = QuizSession()
    session.start(quiz)

    seen = [session.progress_fraction()]
    for _ in range(4):
        assert 0 < seen[-1] <= 1
        session.select_answer(0)
        assert session.progress_fraction() == seen[-1]
        session.advance()
        seen.append(session.progress_fraction())

    assert seen == [0.25, 0.5, 0.75, 1.0, 1.0]
    assert seen == sorted(seen)
    assert seen.index(1.0) == 3
    assert session.state is SessionState.FINISHED


def test_progress_on_last_question_is_one_before_finish(
    two_question_quiz: Quiz,
) -> None:
    session = QuizSession()
    session.start(two_question_quiz)
    answer_all(session, [1])

    assert session.progress_fraction() == 1.0
    assert session.state is SessionState.ANSWERING


def test_score_before_finish_raises(two_question_quiz: Quiz) -> None:
    session = QuizSession()
    session.start(two_question_quiz)
    answer_all(session, [1])

    with pytest.raises(SessionNotFinishedError):
        session.score()


def test_current_question_after_finish_raises(two_question_quiz: Quiz) -> None:
    session = QuizSession()
    session.start(two_question_quiz)
    answer_all(session, [1, 0])

    with pytest.raises(SessionFinishedError):
        session.current_question()
    assert session.score() == (2, 2)


def test_start_rejects_empty_quiz() -> None:
    session = QuizSession()

    with pytest.raises(InvalidQuizError):
        session.start(Quiz(id="empty", topic="Nothing"))

    assert session.state is SessionState.IDLE


def test_failed_start_keeps_running_attempt(two_question_quiz: Quiz) -> None:
    session = QuizSession()
    session.start(two_question_quiz)
    session.select_answer(1)

    with pytest.raises(InvalidQuizError):
        session.start(Quiz(id="empty", topic="Nothing"))

    assert session.quiz is two_question_quiz
    assert session.pending_answer == 1


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.select_answer(0),
        lambda s: s.advance(),
        lambda s: s.current_question(),
        lambda s: s.progress_fraction(),
        lambda s: s.score(),
        lambda s: s.current_index,
        lambda s: list(s.results()),
    ],
)
def test_idle_session_rejects_queries(call) -> None:
    session = QuizSession()

    with pytest.raises(SessionNotStartedError):
        call(session)


def test_reset_returns_to_idle_from_any_state(two_question_quiz: Quiz) -> None:
    session = QuizSession()
    session.reset()
    assert session.state is SessionState.IDLE

    session.start(two_question_quiz)
    session.select_answer(1)
    session.reset()
    assert session.state is SessionState.IDLE
    assert session.quiz is None
    assert session.pending_answer is None

    session.start(two_question_quiz)
    answer_all(session, [1, 0])
    session.reset()
    assert session.state is SessionState.IDLE
    with pytest.raises(SessionNotStartedError):
        session.score()


def test_reset_then_start_matches_fresh_session(
    two_question_quiz: Quiz,
) -> None:
    used = QuizSession()
    used.start(two_question_quiz)
    answer_all(used, [0])
    used.select_answer(2)
    used.reset()
    used.start(two_question_quiz)

    fresh = QuizSession()
    fresh.start(two_question_quiz)

    assert used.snapshot() == fresh.snapshot()


def test_restart_mid_quiz_discards_previous_answers(
    two_question_quiz: Quiz, quiz_factory
) -> None:
    other = quiz_factory([(["x", "y"], 1)], quiz_id="other")
    session = QuizSession()
    session.start(two_question_quiz)
    answer_all(session, [1])
    session.select_answer(0)

    before = session.snapshot()
    session.start(other)

    assert session.quiz is other
    assert session.current_index == 0
    assert session.recorded_answers == ()
    assert session.pending_answer is None
    assert before.recorded_answers == (1,)
    assert before.pending_answer == 0


def test_start_by_id_uses_bank(two_question_quiz: Quiz) -> None:
    session = QuizSession(QuestionBank([two_question_quiz]))

    session.start("pair")

    assert session.quiz is two_question_quiz


def test_start_by_unknown_id(two_question_quiz: Quiz) -> None:
    session = QuizSession(QuestionBank([two_question_quiz]))

    with pytest.raises(QuizNotFoundError):
        session.start("missing")
    assert session.state is SessionState.IDLE


def test_start_by_id_without_bank() -> None:
    with pytest.raises(QuizError, match="no question bank"):
        QuizSession().start("pair")


def test_snapshot_tracks_view_state(two_question_quiz: Quiz) -> None:
    session = QuizSession()
    assert session.snapshot().state is SessionState.IDLE
    assert session.snapshot().question is None

    session.start(two_question_quiz)
    view = session.snapshot()
    assert view.quiz_id == "pair"
    assert view.topic == "Pairs"
    assert view.question_number == 1
    assert view.total_questions == 2
    assert view.progress == 0.5
    assert not view.can_advance
    assert not view.is_last_question

    answer_all(session, [1])
    session.select_answer(0)
    view = session.snapshot()
    assert view.can_advance
    assert view.is_last_question
    assert view.pending_answer == 0

    session.advance()
    view = session.snapshot()
    assert view.state is SessionState.FINISHED
    assert view.question is None
    assert view.question_number == 2
    assert view.progress == 1.0
    assert view.recorded_answers == (1, 0)


def test_results_list_each_answer(two_question_quiz: Quiz) -> None:
    session = QuizSession()
    session.start(two_question_quiz)
    answer_all(session, [1, 2])

    results = list(session.results())

    assert [r.position for r in results] == [1, 2]
    assert [r.is_correct for r in results] == [True, False]
    assert results[1].selected_text == "Blue"
    assert results[1].question.correct_option == "Red"


def test_results_before_finish_raise(two_question_quiz: Quiz) -> None:
    session = QuizSession()
    session.start(two_question_quiz)

    with pytest.raises(SessionNotFinishedError):
        list(session.results())


@pytest.mark.parametrize(
    ("correct", "total", "percentage", "verdict"),
    [
        (1, 2, 50, "keep-studying"),
        (1, 8, 13, "keep-studying"),
        (1, 3, 33, "keep-studying"),
        (2, 3, 67, "good"),
        (3, 5, 60, "good"),
        (4, 5, 80, "excellent"),
        (5, 5, 100, "excellent"),
        (0, 4, 0, "keep-studying"),
    ],
)
def test_score_percentage_rounds_half_up(
    correct: int, total: int, percentage: int, verdict: str
) -> None:
    score = Score(correct, total)

    assert score.percentage == percentage
    assert score.verdict == verdict


def test_transitions_are_logged(two_question_quiz: Quiz, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="study_quiz.quizzer.session")
    session = QuizSession()

    session.start(two_question_quiz)
    with pytest.raises(NoAnswerSelectedError):
        session.advance()
    answer_all(session, [1, 0])
    session.reset()

    events = [getattr(record, "event", None) for record in caplog.records]
    assert events == [
        "session_started",
        "transition_rejected",
        "answer_selected",
        "answer_recorded",
        "answer_selected",
        "answer_recorded",
        "session_finished",
        "session_reset",
    ]
