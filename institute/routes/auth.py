from flask import (Blueprint, render_template, redirect, url_for, flash,
                   request, session, current_app)
from urllib.parse import urlparse
from datetime import timedelta
import logging
import requests as http_requests
from firebase_admin import exceptions as firebase_exceptions

from institute.decorators import auth_required, get_current_user
from institute.firebase_init import get_auth
from institute.forms import LoginForm, SignupForm

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/auth')

FIREBASE_SIGN_IN_URL = (
    'https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword'
)


def _firebase_sign_in(email, password):
    """Verify email/password via Firebase Auth REST API.

    Returns the ID token on success, or None on failure.
    """
    api_key = current_app.config.get('FIREBASE_WEB_API_KEY')
    if not api_key:
        logger.error('FIREBASE_WEB_API_KEY is not configured')
        return None

    try:
        resp = http_requests.post(
            f'{FIREBASE_SIGN_IN_URL}?key={api_key}',
            json={
                'email': email,
                'password': password,
                'returnSecureToken': True,
            },
            timeout=10,
        )
    except http_requests.RequestException:
        logger.exception('Firebase sign-in request failed')
        return None
    if resp.status_code == 200:
        return resp.json().get('idToken')
    return None


def is_safe_url(target):
    if not target:
        return False
    ref_url = urlparse(request.host_url)
    test_url = urlparse(target)
    return test_url.scheme in ('', 'http', 'https') and ref_url.netloc == test_url.netloc


@bp.route('/register', methods=['GET', 'POST'])
def register():
    if get_current_user().is_authenticated:
        return redirect(url_for('main.profile'))

    form = SignupForm()
    if form.validate_on_submit():
        auth = get_auth()
        try:
            auth.create_user(
                email=form.email.data,
                password=form.password.data,
                display_name=form.display_name.data,
            )
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            flash(f'Sign up failed: {e}', 'danger')
            return render_template('auth/register.html', form=form)

        flash('Account created! Please log in.', 'success')
        return redirect(url_for('auth.login'))

    return render_template('auth/register.html', form=form)


@bp.route('/login', methods=['GET', 'POST'])
def login():
    if get_current_user().is_authenticated:
        return redirect(url_for('main.profile'))

    form = LoginForm()
    if form.validate_on_submit():
        id_token = _firebase_sign_in(form.email.data, form.password.data)
        if id_token:
            auth = get_auth()
            try:
                session_cookie = auth.create_session_cookie(
                    id_token, expires_in=timedelta(days=5)
                )
            except (ValueError, firebase_exceptions.FirebaseError):
                logger.exception('Could not create session cookie')
                flash('Something went wrong while logging you in.', 'danger')
                return render_template('auth/login.html', form=form)

            session['firebase_session'] = session_cookie
            flash('Logged in successfully!', 'success')
            next_page = request.args.get('next')
            if next_page and is_safe_url(next_page):
                return redirect(next_page)
            return redirect(url_for('main.profile'))

        flash('Invalid email or password.', 'danger')

    return render_template('auth/login.html', form=form)


@bp.route('/logout')
@auth_required
def logout():
    session.pop('firebase_session', None)
    flash('You have been logged out.', 'success')
    return redirect(url_for('main.index'))
