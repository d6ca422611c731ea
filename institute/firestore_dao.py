"""
Firestore Data Access Object (DAO) layer.

Route handlers, actions and services call functions from this module instead
of querying the document store directly. Every function resolves the shared
client through ``get_db()``.
"""

import re
from datetime import datetime, timezone

from google.cloud.firestore_v1 import FieldFilter, Query, SERVER_TIMESTAMP, transactional

from institute.firebase_init import get_db


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _doc_to_dict(doc_snapshot):
    """Convert a Firestore DocumentSnapshot to a dict with 'id' field."""
    if not doc_snapshot.exists:
        return None
    d = doc_snapshot.to_dict()
    d['id'] = doc_snapshot.id
    return d


def _query_to_list(query_ref):
    """Run a query and return a list of dicts."""
    return [_doc_to_dict(doc) for doc in query_ref.stream()]


def _first(query_ref):
    for doc in query_ref.limit(1).stream():
        return _doc_to_dict(doc)
    return None


def _now():
    return datetime.now(timezone.utc)


def _add(collection, data):
    """Append a document stamped with the store's write time. Returns the doc ID."""
    data = dict(data)
    data['submittedAt'] = SERVER_TIMESTAMP
    _, doc_ref = get_db().collection(collection).add(data)
    return doc_ref.id


# ========================================================================
# Courses  (collection: courses)
# ========================================================================

def get_courses():
    """Get all catalog courses ordered by title."""
    return _query_to_list(get_db().collection('courses').order_by('title'))


def get_featured_courses():
    return _query_to_list(
        get_db().collection('courses')
        .where(filter=FieldFilter('isFeatured', '==', True))
    )


# ========================================================================
# Resources  (collection: resources)
# ========================================================================

def get_resources():
    return _query_to_list(get_db().collection('resources'))


# ========================================================================
# Blog  (collection: blog, doc id = slug)
# ========================================================================

_TAG_RE = re.compile(r'<[^>]+>')


def _blog_post(doc_snapshot):
    post = _doc_to_dict(doc_snapshot)
    if post is None:
        return None
    post['slug'] = doc_snapshot.id
    if not post.get('summary'):
        snippet = _TAG_RE.sub('', post.get('content', ''))[:150]
        post['summary'] = f'{snippet}...'
    return post


def _newest_first(posts):
    posts.sort(key=lambda p: p.get('date', ''), reverse=True)
    return posts


def get_blog_posts():
    """Get all blog posts, newest first."""
    return [
        _blog_post(doc) for doc in
        get_db().collection('blog').order_by('date', direction=Query.DESCENDING).stream()
    ]


def get_blog_post(slug):
    return _blog_post(get_db().collection('blog').document(slug).get())


def get_posts_by_tag(tag):
    docs = (
        get_db().collection('blog')
        .where(filter=FieldFilter('tags', 'array_contains', tag))
        .stream()
    )
    return _newest_first([_blog_post(doc) for doc in docs])


def get_posts_by_category(category):
    docs = (
        get_db().collection('blog')
        .where(filter=FieldFilter('category', '==', category))
        .stream()
    )
    return _newest_first([_blog_post(doc) for doc in docs])


# ========================================================================
# Reviews  (collection: reviews)
# ========================================================================

def get_approved_reviews(limit=None):
    """Get approved reviews, newest first."""
    q = (
        get_db().collection('reviews')
        .where(filter=FieldFilter('isApproved', '==', True))
        .order_by('submittedAt', direction=Query.DESCENDING)
    )
    if limit:
        q = q.limit(limit)
    return _query_to_list(q)


def create_review(data):
    """Append a review. Returns the generated doc ID."""
    return _add('reviews', data)


# ========================================================================
# Contacts / Enrollments  (collections: contacts, enrollments)
# ========================================================================

def create_contact(data):
    return _add('contacts', data)


def create_enrollment(data):
    return _add('enrollments', data)


# ========================================================================
# Site settings  (collection: site_settings)
# ========================================================================

def get_site_setting(name):
    """Get a settings document such as 'announcement' or 'salesPopup'."""
    doc = get_db().collection('site_settings').document(name).get()
    return _doc_to_dict(doc)


# ========================================================================
# Mock tests  (collections: testCategories, mockTests, testResults)
# ========================================================================

def get_test_categories():
    return _query_to_list(get_db().collection('testCategories'))


def get_test_category(category_id):
    doc = get_db().collection('testCategories').document(category_id).get()
    return _doc_to_dict(doc)


def get_mock_test(test_id):
    doc = get_db().collection('mockTests').document(test_id).get()
    return _doc_to_dict(doc)


def get_published_tests_by_category(category_id):
    return _query_to_list(
        get_db().collection('mockTests')
        .where(filter=FieldFilter('categoryId', '==', category_id))
        .where(filter=FieldFilter('isPublished', '==', True))
    )


def get_student_exam_tests():
    """Published tests in the official 'Student Exam' category."""
    return _query_to_list(
        get_db().collection('mockTests')
        .where(filter=FieldFilter('categoryName', '==', 'Student Exam'))
        .where(filter=FieldFilter('isPublished', '==', True))
    )


def create_test_result(data):
    """Append a practice test result. Returns the generated doc ID."""
    return _add('testResults', data)


def get_test_result(result_id):
    doc = get_db().collection('testResults').document(result_id).get()
    return _doc_to_dict(doc)


def get_test_results_by_user(user_id):
    return _query_to_list(
        get_db().collection('testResults')
        .where(filter=FieldFilter('userId', '==', user_id))
    )


# ========================================================================
# Exam registrations  (collection: examRegistrations, doc id = user uid)
# ========================================================================

def get_exam_registration(student_id):
    doc = get_db().collection('examRegistrations').document(student_id).get()
    return _doc_to_dict(doc)


def get_registration_by_number(registration_number):
    return _first(
        get_db().collection('examRegistrations')
        .where(filter=FieldFilter('registrationNumber', '==', registration_number))
    )


def create_exam_registration(uid, data):
    data = dict(data)
    data['registeredAt'] = SERVER_TIMESTAMP
    data.setdefault('isRead', False)
    get_db().collection('examRegistrations').document(uid).set(data)
    return uid


def next_registration_number(year=None):
    """Allocate the next REG-<year>-<NNNN> number.

    The counter document restarts at 1 whenever the calendar year changes.
    """
    db = get_db()
    counter_ref = db.collection('counters').document('examRegistrations')
    year = year or _now().year

    @transactional
    def _bump(transaction):
        snapshot = counter_ref.get(transaction=transaction)
        data = snapshot.to_dict() if snapshot.exists else None
        if not data or data.get('year') != year:
            count = 1
            transaction.set(counter_ref, {'count': count, 'year': year})
        else:
            count = data.get('count', 0) + 1
            transaction.update(counter_ref, {'count': count})
        return count

    count = _bump(db.transaction())
    return f'REG-{year}-{count:04d}'


# ========================================================================
# Exam results  (collection: examResults)
# ========================================================================

def get_exam_result(result_id):
    doc = get_db().collection('examResults').document(result_id).get()
    return _doc_to_dict(doc)


def get_latest_result_by_registration(registration_number):
    """Most recent result for a registration number, or None."""
    return _first(
        get_db().collection('examResults')
        .where(filter=FieldFilter('registrationNumber', '==', registration_number))
        .order_by('submittedAt', direction=Query.DESCENDING)
    )


def get_results_by_registration(registration_number):
    return _query_to_list(
        get_db().collection('examResults')
        .where(filter=FieldFilter('registrationNumber', '==', registration_number))
    )


def get_results_by_test(test_id):
    return _query_to_list(
        get_db().collection('examResults')
        .where(filter=FieldFilter('testId', '==', test_id))
    )


def get_result_by_certificate_id(certificate_id):
    return _first(
        get_db().collection('examResults')
        .where(filter=FieldFilter('certificateId', '==', certificate_id))
    )


def create_exam_result(data):
    """Append an exam result. Returns the generated doc ID."""
    return _add('examResults', data)


# ========================================================================
# Learning modules  (learningModules -> chapters -> lessons)
# ========================================================================

def _module_ref(module_id):
    return get_db().collection('learningModules').document(module_id)


def get_learning_modules():
    """Top-level module documents ordered by 'order' (no chapters)."""
    return _query_to_list(get_db().collection('learningModules').order_by('order'))


def get_learning_module(module_id):
    """Fetch a module with its chapters and lessons, depth first.

    Issues one lessons query per chapter. Returns dict or None.
    """
    module_ref = _module_ref(module_id)
    module = _doc_to_dict(module_ref.get())
    if module is None:
        return None

    chapters = _query_to_list(module_ref.collection('chapters').order_by('order'))
    for chapter in chapters:
        chapter['lessons'] = _query_to_list(
            module_ref.collection('chapters').document(chapter['id'])
            .collection('lessons').order_by('order')
        )
    module['chapters'] = chapters
    return module


def set_learning_module(module_id, data):
    _module_ref(module_id).set(data)


def set_chapter(module_id, chapter_id, data):
    _module_ref(module_id).collection('chapters').document(chapter_id).set(data)


def set_lesson(module_id, chapter_id, lesson_id, data):
    (
        _module_ref(module_id).collection('chapters').document(chapter_id)
        .collection('lessons').document(lesson_id).set(data)
    )


def set_mock_test(test_id, data):
    get_db().collection('mockTests').document(test_id).set(data)


def set_test_category(category_id, data):
    get_db().collection('testCategories').document(category_id).set(data)


# ========================================================================
# Progress  (collection: userProgress, doc id = user uid)
# ========================================================================

def progress_ref(user_id, db=None):
    return (db or get_db()).collection('userProgress').document(user_id)


def get_user_progress(user_id, db=None):
    """Get a user's progress map. Returns {} when no document exists."""
    doc = progress_ref(user_id, db).get()
    if not doc.exists:
        return {}
    return doc.to_dict() or {}


def merge_user_progress(user_id, data, db=None):
    """Field-level merge write of per-module progress records."""
    progress_ref(user_id, db).set(data, merge=True)
