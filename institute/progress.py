"""Per-user learning progress: derived percentages and a live replica.

The progress document (``userProgress/{uid}``) maps a learning module id to
``{completedLessons: [...], lastVisitedLesson: ...}``. Writes are field-level
merges, so concurrent writers are last-write-wins per module record.
"""

import copy
import logging
import threading

from institute import firestore_dao as dao
from institute.models import CourseProgress

logger = logging.getLogger(__name__)


def toggled_lessons(completed, lesson_id):
    """Return a new completed list with ``lesson_id`` added or removed."""
    completed = list(completed or [])
    if lesson_id in completed:
        return [lid for lid in completed if lid != lesson_id]
    return completed + [lesson_id]


def course_progress(progress, module):
    """Completion of ``module`` (a LearningModule) according to ``progress``."""
    if module is None:
        return CourseProgress()

    total = module.total_lessons
    if total == 0:
        return CourseProgress()

    completed = (progress.get(module.id) or {}).get('completedLessons') or []
    completed_count = len(completed)
    return CourseProgress(
        completed_count=completed_count,
        total_lessons=total,
        percentage=completed_count / total * 100,
    )


def toggle_lesson(user_id, module_id, lesson_id, db=None):
    """Read-modify-write toggle used by stateless request handlers.

    Returns the new completed list for the module.
    """
    progress = dao.get_user_progress(user_id, db)
    record = progress.get(module_id) or {}
    completed = toggled_lessons(record.get('completedLessons'), lesson_id)
    dao.merge_user_progress(user_id, {
        module_id: {
            'completedLessons': completed,
            'lastVisitedLesson': lesson_id,
        }
    }, db)
    return completed


def record_last_visited(user_id, module_id, lesson_id, db=None):
    progress = dao.get_user_progress(user_id, db)
    if (progress.get(module_id) or {}).get('lastVisitedLesson') == lesson_id:
        return False
    dao.merge_user_progress(user_id, {module_id: {'lastVisitedLesson': lesson_id}}, db)
    return True


class ProgressSync:
    """Client-held replica of one user's progress document.

    ``start()`` registers a snapshot listener; every change replaces the
    replica and is pushed to ``on_change``. Mutators only write to the store,
    the replica catches up through the listener.
    """

    def __init__(self, db, user_id, on_change=None):
        self.db = db
        self.user_id = user_id
        self.on_change = on_change
        self.progress = {}
        self.is_loading = True
        self._watch = None
        self._lock = threading.Lock()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    @property
    def is_subscribed(self):
        return self._watch is not None

    def start(self):
        if self._watch is not None:
            return
        self.is_loading = True
        self._watch = dao.progress_ref(self.user_id, self.db).on_snapshot(self._on_snapshot)
        logger.debug('Progress subscription opened for %s', self.user_id)

    def stop(self):
        if self._watch is None:
            return
        self._watch.unsubscribe()
        self._watch = None
        logger.debug('Progress subscription closed for %s', self.user_id)

    def _on_snapshot(self, doc_snapshots, changes, read_time):
        data = {}
        for snapshot in doc_snapshots:
            if snapshot.exists:
                data = snapshot.to_dict() or {}
        with self._lock:
            self.progress = data
            self.is_loading = False
        if self.on_change is not None:
            self.on_change(copy.deepcopy(data))

    def snapshot(self):
        with self._lock:
            return copy.deepcopy(self.progress)

    def _write(self, data):
        dao.merge_user_progress(self.user_id, data, self.db)

    def is_lesson_completed(self, module_id, lesson_id):
        record = self.snapshot().get(module_id) or {}
        return lesson_id in (record.get('completedLessons') or [])

    def toggle_lesson_completed(self, module_id, lesson_id):
        record = self.snapshot().get(module_id) or {}
        completed = toggled_lessons(record.get('completedLessons'), lesson_id)
        self._write({
            module_id: {
                'completedLessons': completed,
                'lastVisitedLesson': lesson_id,
            }
        })
        return completed

    def update_last_visited_lesson(self, module_id, lesson_id):
        record = self.snapshot().get(module_id) or {}
        if record.get('lastVisitedLesson') == lesson_id:
            return False
        self._write({module_id: {'lastVisitedLesson': lesson_id}})
        return True

    def course_progress(self, module):
        return course_progress(self.snapshot(), module)
