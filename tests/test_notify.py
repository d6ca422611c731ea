import pytest
import requests

from institute.services import notifications


@pytest.fixture
def student(db):
    db.put('examRegistrations', 'student-1', {
        'fullName': 'Asha Verma',
        'registrationNumber': 'REG-2025-0001',
        'onesignal_player_id': 'player-123',
    })
    return 'student-1'


@pytest.fixture
def provider(monkeypatch, fake_response):
    calls = []
    state = {'response': fake_response(200, {'id': 'notif-1', 'recipients': 1})}

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({'url': url, 'json': json, 'headers': headers, 'timeout': timeout})
        if isinstance(state['response'], Exception):
            raise state['response']
        return state['response']

    monkeypatch.setattr(notifications.http_requests, 'post', fake_post)
    return calls, state


@pytest.mark.parametrize('payload', [
    {},
    {'title': 'Hi', 'message': 'Hello'},
    {'studentId': 'student-1', 'message': 'Hello'},
    {'studentId': 'student-1', 'title': 'Hi'},
    {'studentId': 'student-1'},
    {'title': 'Hi'},
    {'message': 'Hello'},
    {'studentId': '', 'title': 'Hi', 'message': 'Hello'},
    {'studentId': 'student-1', 'title': '   ', 'message': 'Hello'},
    {'studentId': 123, 'title': 'Hi', 'message': 'Hello'},
    {'studentId': 'student-1', 'title': ['Hi'], 'message': 'Hello'},
    {'studentId': 'student-1', 'title': 'Hi', 'message': {'en': 'Hello'}},
    {'studentId': None, 'title': 'Hi', 'message': 'Hello'},
])
def test_missing_or_malformed_fields_rejected_without_calling_provider(client, student, provider, payload):
    calls, _ = provider
    resp = client.post('/api/notify-student', json=payload)
    assert resp.status_code == 400
    assert resp.get_json() == {'success': False, 'error': 'Missing required fields: studentId, title, message'}
    assert calls == []


def test_non_json_body_rejected(client, provider):
    calls, _ = provider
    resp = client.post('/api/notify-student', data='not json', content_type='text/plain')
    assert resp.status_code == 400
    assert calls == []


def test_successful_delivery(client, student, provider):
    calls, _ = provider
    resp = client.post('/api/notify-student', json={
        'studentId': student, 'title': 'Result out', 'message': 'Check your result',
    })
    assert resp.status_code == 200
    assert resp.get_json() == {'success': True, 'response': {'id': 'notif-1', 'recipients': 1}}

    assert len(calls) == 1
    call = calls[0]
    assert call['url'] == 'https://onesignal.test/api/v1/notifications'
    assert call['json'] == {
        'app_id': 'test-app-id',
        'include_player_ids': ['player-123'],
        'headings': {'en': 'Result out'},
        'contents': {'en': 'Check your result'},
    }
    assert call['headers']['Authorization'] == 'Basic test-rest-key'
    assert call['timeout'] == 10


def test_unknown_student_is_404(client, provider):
    calls, _ = provider
    resp = client.post('/api/notify-student', json={'studentId': 'ghost', 'title': 'Hi', 'message': 'Hello'})
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'Student not found.'
    assert calls == []


def test_student_without_player_id_is_404(client, db, provider):
    calls, _ = provider
    db.put('examRegistrations', 'student-2', {'fullName': 'No Device'})
    resp = client.post('/api/notify-student', json={'studentId': 'student-2', 'title': 'Hi', 'message': 'Hello'})
    assert resp.status_code == 404
    assert resp.get_json() == {'success': False, 'error': 'OneSignal Player ID not found for this student.'}
    assert calls == []


def test_missing_credentials_is_500(app, client, student, provider):
    calls, _ = provider
    app.config['ONESIGNAL_REST_API_KEY'] = None
    resp = client.post('/api/notify-student', json={'studentId': student, 'title': 'Hi', 'message': 'Hello'})
    assert resp.status_code == 500
    assert resp.get_json()['success'] is False
    assert calls == []


def test_credentials_checked_before_student_lookup(app, client, provider):
    app.config['ONESIGNAL_APP_ID'] = ''
    resp = client.post('/api/notify-student', json={'studentId': 'ghost', 'title': 'Hi', 'message': 'Hello'})
    assert resp.status_code == 500


@pytest.mark.parametrize('status', [400, 401, 429, 503])
def test_provider_error_status_is_passed_through(client, student, provider, fake_response, status):
    _, state = provider
    state['response'] = fake_response(status, {'errors': ['bad things']})
    resp = client.post('/api/notify-student', json={'studentId': student, 'title': 'Hi', 'message': 'Hello'})
    assert resp.status_code == status
    body = resp.get_json()
    assert body['success'] is False
    assert body['details'] == {'errors': ['bad things']}


def test_transport_error_is_500(client, student, provider):
    _, state = provider
    state['response'] = requests.ConnectionError('connection refused')
    resp = client.post('/api/notify-student', json={'studentId': student, 'title': 'Hi', 'message': 'Hello'})
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['success'] is False
    assert 'connection refused' in body['details']


def test_parse_payload_strips_values():
    assert notifications.parse_payload({'studentId': ' s1 ', 'title': 'T', 'message': 'M'}) == ('s1', 'T', 'M')
