import pytest

from institute import firestore_dao as dao, socketio
from institute.events import progress_subscriptions


@pytest.fixture
def socket_client(app, client):
    clients = []

    def _connect():
        sc = socketio.test_client(app, flask_test_client=client)
        clients.append(sc)
        return sc

    yield _connect
    for sc in clients:
        if sc.is_connected():
            sc.disconnect()


def _events(sc, name):
    return [r['args'][0] for r in sc.get_received() if r['name'] == name]


def test_subscribe_requires_login(socket_client):
    sc = socket_client()
    sc.emit('subscribe_progress')
    assert _events(sc, 'error') == [{'message': 'Authentication required'}]


def test_progress_changes_are_pushed(app, login, socket_client, db):
    login('u1')
    sc = socket_client()
    sc.get_received()

    sc.emit('subscribe_progress')
    [initial] = _events(sc, 'progress_changed')
    assert initial == {'user_id': 'u1', 'progress': {}}

    with app.app_context():
        dao.merge_user_progress('u1', {'html': {'completedLessons': ['headings']}})
    [update] = _events(sc, 'progress_changed')
    assert update['progress'] == {'html': {'completedLessons': ['headings']}}


def test_unsubscribe_stops_pushes(app, login, socket_client, db):
    login('u1')
    sc = socket_client()
    sc.emit('subscribe_progress')
    sc.emit('unsubscribe_progress')
    received = sc.get_received()
    assert [r['name'] for r in received if r['name'] == 'progress_unsubscribed'] == ['progress_unsubscribed']

    with app.app_context():
        dao.merge_user_progress('u1', {'html': {'completedLessons': ['headings']}})
    assert _events(sc, 'progress_changed') == []


def test_disconnect_closes_subscription(login, socket_client, db):
    login('u1')
    sc = socket_client()
    sc.emit('subscribe_progress')
    assert db.watchers[('userProgress', 'u1')]
    sc.disconnect()
    assert db.watchers[('userProgress', 'u1')] == []
    assert progress_subscriptions == {}


def test_toggle_lesson_over_socket(login, socket_client, learning_module, db):
    login('u1')
    sc = socket_client()
    sc.emit('subscribe_progress')
    sc.get_received()

    sc.emit('toggle_lesson', {'moduleId': 'html', 'lessonId': 'headings'})
    received = sc.get_received()
    acks = [r['args'][0] for r in received if r['name'] == 'lesson_toggled']
    assert acks == [{'moduleId': 'html', 'lessonId': 'headings', 'completed': True}]
    pushed = [r['args'][0] for r in received if r['name'] == 'progress_changed']
    assert pushed[-1]['progress']['html']['completedLessons'] == ['headings']
    assert db.data('userProgress')['u1']['html'] == {
        'completedLessons': ['headings'], 'lastVisitedLesson': 'headings',
    }

    sc.emit('toggle_lesson', {'moduleId': 'html', 'lessonId': 'headings'})
    assert _events(sc, 'lesson_toggled') == [{'moduleId': 'html', 'lessonId': 'headings', 'completed': False}]
    assert db.data('userProgress')['u1']['html']['completedLessons'] == []


def test_visit_lesson_reports_completion(login, socket_client, learning_module, db):
    db.put('userProgress', 'u1', {'html': {'completedLessons': ['links'], 'lastVisitedLesson': 'headings'}})
    login('u1')
    sc = socket_client()
    sc.emit('subscribe_progress')
    sc.get_received()

    sc.emit('visit_lesson', {'moduleId': 'html', 'lessonId': 'links'})
    assert _events(sc, 'lesson_visited') == [{'moduleId': 'html', 'lessonId': 'links', 'completed': True}]
    assert db.data('userProgress')['u1']['html']['lastVisitedLesson'] == 'links'


def test_toggle_requires_subscription(login, socket_client, learning_module, db):
    login('u1')
    sc = socket_client()
    sc.get_received()
    sc.emit('toggle_lesson', {'moduleId': 'html', 'lessonId': 'headings'})
    assert _events(sc, 'error') == [{'message': 'Subscribe to progress first'}]
    assert db.data('userProgress') == {}


def test_toggle_unknown_lesson(login, socket_client, learning_module, db):
    login('u1')
    sc = socket_client()
    sc.emit('subscribe_progress')
    sc.get_received()
    sc.emit('toggle_lesson', {'moduleId': 'html', 'lessonId': 'missing'})
    assert _events(sc, 'error') == [{'message': 'Lesson not found'}]
    sc.emit('toggle_lesson', {'moduleId': 'nope', 'lessonId': 'headings'})
    assert _events(sc, 'error') == [{'message': 'Lesson not found'}]
    assert db.data('userProgress') == {}
