from datetime import datetime

import pytest

from domain import Tutorial, TutorialLesson, TutorialProgress
from services.errors import AuthRequiredError, LessonNotFoundError, NotFoundError, ValidationError
from services.progress import TutorialProgressTracker

NOW = datetime(2023, 9, 1, 12, 0)


def _tracker(store, tutorial, user):
    return TutorialProgressTracker(store, tutorial.id, user.id, clock=lambda: NOW).load()


def test_first_access_starts_at_first_lesson(store, tutorial, player):
    tracker = _tracker(store, tutorial, player)
    lessons = store.list_lessons(tutorial.id)

    assert [l.sequence_order for l in lessons] == [1, 2, 3, 4, 5]
    assert tracker.progress.progress == TutorialProgress.NOT_STARTED
    assert tracker.progress.current_lesson_id == lessons[0].id
    assert tracker.progress.total_lessons == 5
    assert tracker.progress.completed_lessons == 0
    assert store.get_progress(player.id, tutorial.id) is not None


def test_completed_lessons_never_decrease(store, tutorial, player):
    tracker = _tracker(store, tutorial, player)
    lessons = tracker.lessons

    tracker.mark_lesson_complete(lessons[2].id)
    assert tracker.progress.completed_lessons == 3
    assert tracker.progress.progress == TutorialProgress.IN_PROGRESS

    tracker.mark_lesson_complete(lessons[0].id)
    assert tracker.progress.completed_lessons == 3
    assert tracker.progress.current_lesson_id == lessons[0].id
    assert store.get_progress(player.id, tutorial.id).completed_lessons == 3


def test_completion_is_terminal(store, tutorial, player):
    tracker = _tracker(store, tutorial, player)
    tracker.mark_lesson_complete(tracker.lessons[-1].id)

    p = tracker.progress
    assert p.progress == TutorialProgress.COMPLETED
    assert p.completed_lessons == 5
    assert p.certificate_issued is True
    assert p.completion_date == NOW

    tracker.move_to_previous_lesson()
    tracker.move_to_lesson(tracker.lessons[0].id)
    tracker.mark_lesson_complete(tracker.lessons[1].id)

    saved = store.get_progress(player.id, tutorial.id)
    assert saved.progress == TutorialProgress.COMPLETED
    assert saved.certificate_issued is True
    assert saved.completion_date == NOW
    assert saved.current_lesson_id == tracker.lessons[1].id


def test_next_and_previous(store, tutorial, player):
    tracker = _tracker(store, tutorial, player)

    tracker.move_to_previous_lesson()
    assert tracker.current_index == 0
    assert tracker.progress.progress == TutorialProgress.NOT_STARTED

    tracker.move_to_next_lesson()
    assert tracker.current_index == 1
    assert tracker.progress.progress == TutorialProgress.IN_PROGRESS

    for _ in range(10):
        tracker.move_to_next_lesson()
    assert tracker.current_index == 4
    assert tracker.current_lesson.sequence_order == 5

    tracker.move_to_previous_lesson()
    assert tracker.current_index == 3
    # navigation alone never counts as completing
    assert tracker.progress.completed_lessons == 0


def test_progress_survives_reload(store, tutorial, player):
    tracker = _tracker(store, tutorial, player)
    tracker.mark_lesson_complete(tracker.lessons[1].id)

    again = _tracker(store, tutorial, player)
    assert again.current_index == 1
    assert again.progress.completed_lessons == 2


def test_unknown_lesson(store, tutorial, player):
    tracker = _tracker(store, tutorial, player)
    with pytest.raises(LessonNotFoundError):
        tracker.move_to_lesson(9999)
    with pytest.raises(NotFoundError):
        tracker.mark_lesson_complete(9999)


def test_anonymous_can_browse_but_not_track(store, tutorial):
    tracker = TutorialProgressTracker(store, tutorial.id).load()
    assert tracker.progress is None
    assert tracker.current_lesson.sequence_order == 1
    with pytest.raises(AuthRequiredError):
        tracker.mark_lesson_complete(tracker.lessons[0].id)
    with pytest.raises(AuthRequiredError):
        tracker.move_to_next_lesson()


def test_missing_tutorial(store, player):
    with pytest.raises(NotFoundError):
        TutorialProgressTracker(store, 12345, player.id).load()


def test_tutorial_without_lessons(store, player):
    empty = store.create_tutorial(Tutorial(title="Coming soon", sport_category="Golf", difficulty="expert"))
    tracker = TutorialProgressTracker(store, empty.id, player.id).load()
    assert tracker.current_lesson is None
    with pytest.raises(ValidationError):
        tracker.move_to_next_lesson()


def test_duplicate_sequence_order_rejected(store, tutorial):
    with pytest.raises(ValidationError):
        store.add_lesson(TutorialLesson(tutorial_id=tutorial.id, title="Dup", sequence_order=3))
    assert len(store.list_lessons(tutorial.id)) == 5
