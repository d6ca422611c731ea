from institute import firestore_dao as dao
from institute.models import Chapter, Lesson, LearningModule
from institute.progress import ProgressSync, course_progress, toggled_lessons


def _module(lesson_ids, module_id='html'):
    return LearningModule(id=module_id, chapters=[
        Chapter(id='c1', lessons=[Lesson(id=lid) for lid in lesson_ids]),
    ])


def test_toggle_adds_then_removes():
    completed = ['a', 'b']
    once = toggled_lessons(completed, 'c')
    assert once == ['a', 'b', 'c']
    assert set(toggled_lessons(once, 'c')) == set(completed)
    assert completed == ['a', 'b']


def test_course_progress_percentage():
    module = _module(['a', 'b', 'c', 'd'])
    progress = course_progress({'html': {'completedLessons': ['a']}}, module)
    assert (progress.completed_count, progress.total_lessons, progress.percentage) == (1, 4, 25)


def test_course_progress_without_lessons_is_zero():
    progress = course_progress({'html': {'completedLessons': ['a']}}, _module([]))
    assert (progress.completed_count, progress.total_lessons, progress.percentage) == (0, 0, 0)


def test_course_progress_for_unknown_module():
    progress = course_progress({}, _module(['a', 'b']))
    assert progress.completed_count == 0
    assert progress.percentage == 0


def test_sync_mirrors_store_and_pushes_changes(db):
    pushed = []
    with ProgressSync(db, 'u1', on_change=pushed.append) as sync:
        assert sync.is_subscribed
        assert sync.is_loading is False
        assert pushed == [{}]

        sync.toggle_lesson_completed('html', 'what-is-html')
        assert sync.is_lesson_completed('html', 'what-is-html')
        assert pushed[-1] == {'html': {'completedLessons': ['what-is-html'], 'lastVisitedLesson': 'what-is-html'}}

        sync.toggle_lesson_completed('html', 'what-is-html')
        assert not sync.is_lesson_completed('html', 'what-is-html')

    assert not sync.is_subscribed
    count = len(pushed)
    db.collection('userProgress').document('u1').set({'css': {'completedLessons': ['x']}}, merge=True)
    assert len(pushed) == count


def test_sync_sees_writes_from_other_writers(db):
    with ProgressSync(db, 'u1') as sync:
        dao.merge_user_progress('u1', {'css': {'completedLessons': ['selectors']}}, db)
        assert sync.is_lesson_completed('css', 'selectors')


def test_writes_merge_per_module(db):
    with ProgressSync(db, 'u1') as sync:
        sync.toggle_lesson_completed('html', 'a')
        sync.toggle_lesson_completed('css', 'b')
        sync.update_last_visited_lesson('html', 'z')
        data = sync.snapshot()

    assert data['html'] == {'completedLessons': ['a'], 'lastVisitedLesson': 'z'}
    assert data['css'] == {'completedLessons': ['b'], 'lastVisitedLesson': 'b'}


def test_last_visited_skips_redundant_write(db):
    with ProgressSync(db, 'u1') as sync:
        assert sync.update_last_visited_lesson('html', 'a') is True
        assert sync.update_last_visited_lesson('html', 'a') is False


def test_sync_course_progress(db):
    module = _module(['a', 'b'])
    with ProgressSync(db, 'u1') as sync:
        sync.toggle_lesson_completed('html', 'a')
        assert sync.course_progress(module).percentage == 50


def test_complete_endpoint_toggles(client, login, learning_module, db):
    login('u1')
    resp = client.post('/learn/html/structure/complete')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['completed'] is True
    assert body['progress'] == {'completedCount': 1, 'totalLessons': 4, 'percentage': 25.0}
    assert db.data('userProgress')['u1']['html']['completedLessons'] == ['structure']

    body = client.post('/learn/html/structure/complete').get_json()
    assert body['completed'] is False
    assert body['progress']['completedCount'] == 0


def test_complete_endpoint_requires_login(client, learning_module):
    resp = client.post('/learn/html/structure/complete')
    assert resp.status_code == 302
    assert '/auth/login' in resp.headers['Location']


def test_complete_unknown_lesson_is_404(client, login, learning_module):
    login('u1')
    resp = client.post('/learn/html/nope/complete')
    assert resp.status_code == 404
