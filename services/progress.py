"""
Tutorial progress state machine.

    not_started --(complete a lesson / move past lesson 1)--> in_progress
    in_progress --(completed_lessons reaches total_lessons)--> completed

`completed` is terminal: revisiting lessons afterwards moves
current_lesson_id but never reverts progress, completion_date or
certificate_issued. completed_lessons never decreases.
"""
import logging
from datetime import datetime

from domain import TutorialProgress, UserTutorialProgress
from services.errors import AuthRequiredError, LessonNotFoundError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class TutorialProgressTracker:
    def __init__(self, store, tutorial_id, user_id=None, clock=datetime.utcnow):
        self.store = store
        self.tutorial_id = tutorial_id
        self.user_id = user_id
        self.clock = clock
        self.tutorial = None
        self.lessons = []
        self.progress = None

    def load(self):
        self.tutorial = self.store.get_tutorial(self.tutorial_id)
        if self.tutorial is None:
            raise NotFoundError("Tutorial not found")
        self.lessons = self.store.list_lessons(self.tutorial_id)

        if self.user_id is not None and self.lessons:
            self.progress = self.store.get_progress(self.user_id, self.tutorial_id)
            if self.progress is None:
                # first access: start at the first lesson by sequence_order
                self.progress = self.store.save_progress(UserTutorialProgress(
                    user_id=self.user_id,
                    tutorial_id=self.tutorial_id,
                    current_lesson_id=self.lessons[0].id,
                    progress=TutorialProgress.NOT_STARTED,
                    completed_lessons=0,
                    total_lessons=len(self.lessons),
                    last_accessed=self.clock(),
                ))
        return self

    @property
    def current_index(self) -> int:
        if self.progress is not None:
            for i, lesson in enumerate(self.lessons):
                if lesson.id == self.progress.current_lesson_id:
                    return i
        return 0

    @property
    def current_lesson(self):
        return self.lessons[self.current_index] if self.lessons else None

    def _require_progress(self):
        if self.user_id is None:
            raise AuthRequiredError("Log in to track tutorial progress")
        if self.tutorial is None:
            self.load()
        if not self.lessons:
            raise ValidationError("Tutorial has no lessons")
        return self.progress

    def _index_of(self, lesson_id) -> int:
        for i, lesson in enumerate(self.lessons):
            if lesson.id == lesson_id:
                return i
        raise LessonNotFoundError()

    def _save(self):
        self.progress.last_accessed = self.clock()
        self.progress = self.store.save_progress(self.progress)
        return self.progress

    def mark_lesson_complete(self, lesson_id):
        p = self._require_progress()
        index = self._index_of(lesson_id)

        completed = max(p.completed_lessons, index + 1)
        p.completed_lessons = min(completed, p.total_lessons)
        p.current_lesson_id = lesson_id

        if p.progress != TutorialProgress.COMPLETED:
            if p.completed_lessons >= p.total_lessons:
                p.progress = TutorialProgress.COMPLETED
            else:
                p.progress = TutorialProgress.IN_PROGRESS

        if p.progress == TutorialProgress.COMPLETED:
            if p.completion_date is None:
                p.completion_date = self.clock()
                logger.info("User %s completed tutorial %s", self.user_id, self.tutorial_id)
            p.certificate_issued = True

        return self._save()

    def _move(self, index, promote):
        p = self.progress
        p.current_lesson_id = self.lessons[index].id
        if promote and p.progress == TutorialProgress.NOT_STARTED:
            p.progress = TutorialProgress.IN_PROGRESS
        return self._save()

    def move_to_next_lesson(self):
        self._require_progress()
        index = self.current_index
        if index >= len(self.lessons) - 1:
            return self.progress
        return self._move(index + 1, promote=True)

    def move_to_previous_lesson(self):
        self._require_progress()
        index = self.current_index
        if index <= 0:
            return self.progress
        return self._move(index - 1, promote=False)

    def move_to_lesson(self, lesson_id):
        self._require_progress()
        index = self._index_of(lesson_id)
        return self._move(index, promote=index > 0)
