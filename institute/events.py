import logging

from flask import request
from flask_socketio import emit
from institute import socketio
from institute.decorators import get_current_user
from institute import firestore_dao as dao
from institute.firebase_init import get_db
from institute.models import LearningModule
from institute.progress import ProgressSync

logger = logging.getLogger(__name__)

# socket sid -> ProgressSync
progress_subscriptions = {}


def _get_socket_user():
    """Get current user from the Flask session context in Socket.IO events."""
    user = get_current_user()
    if user and user.is_authenticated:
        return user
    return None


def _close_subscription(sid):
    sync = progress_subscriptions.pop(sid, None)
    if sync is not None:
        sync.stop()
    return sync is not None


@socketio.on('connect')
def handle_connect():
    user = _get_socket_user()
    if user:
        emit('connected', {'user_id': user.uid})


@socketio.on('disconnect')
def handle_disconnect(*args):
    _close_subscription(request.sid)


@socketio.on('subscribe_progress')
def handle_subscribe_progress(data=None):
    user = _get_socket_user()
    if not user:
        emit('error', {'message': 'Authentication required'})
        return

    sid = request.sid
    # A new subscription for the same socket replaces the old one
    _close_subscription(sid)

    def push(progress):
        socketio.emit('progress_changed', {'user_id': user.uid, 'progress': progress}, to=sid)

    sync = ProgressSync(get_db(), user.uid, on_change=push)
    progress_subscriptions[sid] = sync
    sync.start()
    logger.info('Socket %s subscribed to progress of %s', sid, user.uid)


@socketio.on('unsubscribe_progress')
def handle_unsubscribe_progress(data=None):
    if _close_subscription(request.sid):
        emit('progress_unsubscribed', {})


def _subscribed_lesson(data):
    """Resolve the socket's live subscription and the lesson named in ``data``.

    Emits an ``error`` event and returns ``(None, None, None)`` when either is
    missing.
    """
    sync = progress_subscriptions.get(request.sid)
    if sync is None or sync.is_loading:
        emit('error', {'message': 'Subscribe to progress first'})
        return None, None, None

    data = data or {}
    module_id, lesson_id = data.get('moduleId'), data.get('lessonId')
    module_doc = dao.get_learning_module(module_id) if module_id else None
    lesson = None
    if module_doc is not None:
        _, lesson, _, _ = LearningModule.from_tree(module_doc).find_lesson(lesson_id)
    if lesson is None:
        emit('error', {'message': 'Lesson not found'})
        return None, None, None
    return sync, module_doc['id'], lesson.id


@socketio.on('toggle_lesson')
def handle_toggle_lesson(data=None):
    sync, module_id, lesson_id = _subscribed_lesson(data)
    if sync is None:
        return
    completed = sync.toggle_lesson_completed(module_id, lesson_id)
    emit('lesson_toggled', {'moduleId': module_id, 'lessonId': lesson_id, 'completed': lesson_id in completed})


@socketio.on('visit_lesson')
def handle_visit_lesson(data=None):
    sync, module_id, lesson_id = _subscribed_lesson(data)
    if sync is None:
        return
    sync.update_last_visited_lesson(module_id, lesson_id)
    emit('lesson_visited', {
        'moduleId': module_id,
        'lessonId': lesson_id,
        'completed': sync.is_lesson_completed(module_id, lesson_id),
    })
