import copy
from datetime import datetime, timedelta, timezone

import pytest
from google.api_core.exceptions import ServiceUnavailable
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from config import Config
from institute import create_app


class PortalTestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    WTF_CSRF_ENABLED = False
    SOCKETIO_ASYNC_MODE = 'threading'
    ONESIGNAL_APP_ID = 'test-app-id'
    ONESIGNAL_REST_API_KEY = 'test-rest-key'
    ONESIGNAL_API_URL = 'https://onesignal.test/api/v1/notifications'
    FIREBASE_WEB_API_KEY = 'test-web-key'
    CERTIFICATE_LOGO_URL = None
    SITE_URL = 'https://mtechitinstitute.in'
    LOG_LEVEL = 'DEBUG'


# ---------------------------------------------------------------------------
# In-memory Firestore double
# ---------------------------------------------------------------------------

def _merge(target, data):
    for key, value in data.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeWatch:
    def __init__(self, store, path, callback):
        self._store = store
        self._path = path
        self.callback = callback

    def unsubscribe(self):
        watchers = self._store.watchers.get(self._path, [])
        if self in watchers:
            watchers.remove(self)


class FakeDocument:
    def __init__(self, store, path):
        self._store = store
        self.path = path
        self.id = path[-1]

    def collection(self, name):
        return FakeCollection(self._store, self.path + (name,))

    def get(self, transaction=None):
        return FakeSnapshot(self, self._store.docs.get(self.path))

    def set(self, data, merge=False):
        self._store.check_writable()
        data = self._store.resolve(data)
        if merge and self.path in self._store.docs:
            _merge(self._store.docs[self.path], data)
        else:
            self._store.docs[self.path] = copy.deepcopy(data)
        self._store.notify(self.path)

    def update(self, data):
        self._store.check_writable()
        self._store.docs[self.path].update(self._store.resolve(data))
        self._store.notify(self.path)

    def delete(self):
        self._store.docs.pop(self.path, None)
        self._store.notify(self.path)

    def on_snapshot(self, callback):
        watch = FakeWatch(self._store, self.path, callback)
        self._store.watchers.setdefault(self.path, []).append(watch)
        callback([self.get()], [], datetime.now(timezone.utc))
        return watch


class FakeQuery:
    def __init__(self, store, path, filters=(), orders=(), limit_count=None):
        self._store = store
        self._path = path
        self._filters = tuple(filters)
        self._orders = tuple(orders)
        self._limit = limit_count

    def _copy(self, **changes):
        values = dict(filters=self._filters, orders=self._orders, limit_count=self._limit)
        values.update(changes)
        return FakeQuery(self._store, self._path, **values)

    def where(self, filter=None):
        return self._copy(filters=self._filters + (filter,))

    def order_by(self, field_path, direction='ASCENDING'):
        return self._copy(orders=self._orders + ((field_path, direction),))

    def limit(self, count):
        return self._copy(limit_count=count)

    @staticmethod
    def _matches(data, field_filter):
        op = field_filter.op_string
        value = field_filter.value
        actual = data.get(field_filter.field_path)
        if op == '==':
            return field_filter.field_path in data and actual == value
        if op == 'array_contains':
            return isinstance(actual, list) and value in actual
        if op == 'in':
            return actual in value
        raise NotImplementedError(op)

    def stream(self):
        rows = [
            (path, data) for path, data in self._store.docs.items()
            if len(path) == len(self._path) + 1 and path[:-1] == self._path
        ]
        rows = [r for r in rows if all(self._matches(r[1], f) for f in self._filters)]
        for field_path, direction in reversed(self._orders):
            rows = [r for r in rows if field_path in r[1]]
            rows.sort(key=lambda r: r[1][field_path], reverse=(direction == 'DESCENDING'))
        if self._limit is not None:
            rows = rows[:self._limit]
        return iter([FakeSnapshot(FakeDocument(self._store, path), data) for path, data in rows])


class FakeCollection(FakeQuery):
    def __init__(self, store, path):
        super().__init__(store, path)

    def document(self, doc_id=None):
        if doc_id is None:
            self._store.counter += 1
            doc_id = f'auto{self._store.counter:04d}'
        return FakeDocument(self._store, self._path + (doc_id,))

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return self._store.now(), ref


class FakeFirestore:
    """Just enough of the Firestore client surface for the portal."""

    def __init__(self):
        self.docs = {}
        self.watchers = {}
        self.counter = 0
        self.fail_writes = False
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def collection(self, name):
        return FakeCollection(self, (name,))

    def now(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    def check_writable(self):
        if self.fail_writes:
            raise ServiceUnavailable('store unavailable')

    def resolve(self, data):
        resolved = {}
        for key, value in data.items():
            if value is SERVER_TIMESTAMP:
                value = self.now()
            elif isinstance(value, dict):
                value = self.resolve(value)
            resolved[key] = value
        return resolved

    def notify(self, path):
        for watch in list(self.watchers.get(path, [])):
            watch.callback([FakeDocument(self, path).get()], [], self.now())

    # test helpers
    def put(self, collection, doc_id, data):
        self.collection(collection).document(doc_id).set(data)

    def data(self, collection):
        return {path[1]: data for path, data in self.docs.items()
                if len(path) == 2 and path[0] == collection}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def app(db):
    app = create_app(PortalTestConfig, db=db)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(monkeypatch, db):
    """Sign a user in by replacing session-cookie verification."""

    def _login(uid='student-1', email='student@example.com', display_name='Test Student'):
        def fake_verify():
            user = {'uid': uid, 'id': uid, 'email': email, 'display_name': display_name}
            reg = db.collection('examRegistrations').document(uid).get()
            if reg.exists:
                user['registration'] = reg.to_dict()
            return user

        monkeypatch.setattr('institute.decorators._verify_session', fake_verify)
        return uid

    return _login


@pytest.fixture
def learning_module(db):
    db.put('learningModules', 'html', {'title': 'HTML Foundations', 'order': 1, 'description': 'Basics'})
    chapters = db.collection('learningModules').document('html').collection('chapters')
    chapters.document('intro').set({'title': 'Introduction', 'order': 1})
    chapters.document('elements').set({'title': 'Elements', 'order': 2})
    intro = chapters.document('intro').collection('lessons')
    intro.document('what-is-html').set({'title': 'What is HTML?', 'order': 1, 'theory': '<p>HTML</p>'})
    intro.document('structure').set({'title': 'Structure', 'order': 2, 'theory': '<p>Doc</p>'})
    elements = chapters.document('elements').collection('lessons')
    elements.document('headings').set({'title': 'Headings', 'order': 1, 'theory': '<p>h1</p>'})
    elements.document('links').set({'title': 'Links', 'order': 2, 'theory': '<p>a</p>'})
    return 'html'


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=''):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError('no json')
        return self._payload


@pytest.fixture
def fake_response():
    return FakeResponse
