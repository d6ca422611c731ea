import logging

import requests as http_requests
from flask import current_app

from institute import firestore_dao as dao
from institute.errors import InternalError, InvalidInput, NotFound, ServerConfig, UpstreamFailure

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('studentId', 'title', 'message')


def _credentials():
    """Push credentials are read per call; missing ones fail this request only."""
    app_id = current_app.config.get('ONESIGNAL_APP_ID')
    rest_key = current_app.config.get('ONESIGNAL_REST_API_KEY')
    if not app_id or not rest_key:
        logger.error('OneSignal environment variables are not set.')
        raise ServerConfig('Server configuration error for notifications.')
    return app_id, rest_key


def parse_payload(payload):
    """Validate ``{studentId, title, message}`` and return the three values."""
    if not isinstance(payload, dict):
        payload = {}
    values = []
    for name in REQUIRED_FIELDS:
        value = payload.get(name)
        if not isinstance(value, str) or not value.strip():
            raise InvalidInput('Missing required fields: studentId, title, message')
        values.append(value.strip())
    return tuple(values)


def get_player_id(student_id):
    student = dao.get_exam_registration(student_id)
    if student is None:
        raise NotFound('Student not found.')
    player_id = student.get('onesignal_player_id')
    if not player_id:
        raise NotFound('OneSignal Player ID not found for this student.')
    return player_id


def send_push(app_id, rest_key, player_id, title, message):
    """POST one notification to OneSignal and return its decoded body.

    Non-2xx responses raise UpstreamFailure carrying the provider status.
    """
    try:
        resp = http_requests.post(
            current_app.config.get('ONESIGNAL_API_URL', 'https://onesignal.com/api/v1/notifications'),
            json={
                'app_id': app_id,
                'include_player_ids': [player_id],
                'headings': {'en': title},
                'contents': {'en': message},
            },
            headers={
                'Content-Type': 'application/json; charset=utf-8',
                'Authorization': f'Basic {rest_key}',
            },
            timeout=10,
        )
    except http_requests.RequestException as e:
        logger.error('OneSignal request failed: %s', e)
        raise InternalError('Failed to send notification.', details=str(e))

    try:
        body = resp.json()
    except ValueError:
        body = {'raw': resp.text}

    if not resp.ok:
        logger.warning('OneSignal API returned an error status %s: %s', resp.status_code, body)
        raise UpstreamFailure('Failed to send notification.', details=body, status_code=resp.status_code)

    logger.info('OneSignal notification accepted for player %s', player_id)
    return body


def notify_student(payload):
    """Validate the request payload and deliver one push notification."""
    student_id, title, message = parse_payload(payload)
    app_id, rest_key = _credentials()
    player_id = get_player_id(student_id)
    return send_push(app_id, rest_key, player_id, title, message)
