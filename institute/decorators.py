from functools import wraps
from flask import request, redirect, url_for, flash, g, session
from institute.firebase_init import get_auth, get_db


def _verify_session():
    """Verify Firebase session cookie and build the current user dict."""
    session_cookie = session.get('firebase_session')
    if not session_cookie:
        return None

    auth = get_auth()
    try:
        decoded = auth.verify_session_cookie(session_cookie, check_revoked=True)
    except (auth.InvalidSessionCookieError, auth.RevokedSessionCookieError,
            auth.ExpiredSessionCookieError, auth.UserDisabledError):
        session.pop('firebase_session', None)
        return None

    uid = decoded['uid']
    user_data = {
        'uid': uid,
        'id': uid,
        'email': decoded.get('email', ''),
        'display_name': decoded.get('name') or session.get('display_name', ''),
    }
    # Exam registrations are keyed by uid and carry the student's name
    reg_doc = get_db().collection('examRegistrations').document(uid).get()
    if reg_doc.exists:
        user_data['registration'] = reg_doc.to_dict()
    return user_data


class CurrentUser:
    """Proxy object providing attribute access to the current user dict."""

    def __init__(self, data=None):
        self._data = data or {}

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        return self._data.get(name)

    def __getitem__(self, key):
        return self._data[key]

    def __contains__(self, key):
        return key in self._data

    def get(self, key, default=None):
        return self._data.get(key, default)

    @property
    def is_authenticated(self):
        return bool(self._data)

    @property
    def uid(self):
        return self._data.get('uid', '')

    @property
    def id(self):
        return self._data.get('uid', '')

    @property
    def display_name(self):
        if self._data.get('display_name'):
            return self._data['display_name']
        registration = self._data.get('registration') or {}
        if registration.get('fullName'):
            return registration['fullName']
        return self._data.get('email', '')


def load_current_user():
    """Load current user into g before each request."""
    if hasattr(g, '_current_user'):
        return
    user_data = _verify_session()
    g._current_user = CurrentUser(user_data)


def get_current_user():
    if not hasattr(g, '_current_user'):
        load_current_user()
    return g._current_user


def auth_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        user = get_current_user()
        if not user.is_authenticated:
            flash('Please log in to continue.', 'info')
            return redirect(url_for('auth.login', next=request.url))
        g.current_user = user
        return f(*args, **kwargs)
    return decorated
