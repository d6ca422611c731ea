"""Error taxonomy for request handlers and the error-event channel.

Request handlers raise ``PortalError`` subclasses; the app-level handler turns
them into ``{success: false, error, details?}`` JSON bodies.

Failures detected outside the JSON API (form actions, progress writes,
lookups) are published as ``ErrorRecord`` objects on the ``error-reported``
signal. A single listener per app logs them and flashes the client-safe text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from blinker import Namespace
from flask import current_app, flash, has_app_context, has_request_context, jsonify

logger = logging.getLogger(__name__)


class PortalError(Exception):
    status_code = 500
    kind = 'internal'

    def __init__(self, message: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {'success': False, 'error': self.message}
        if self.details is not None:
            body['details'] = self.details
        return body


class InvalidInput(PortalError):
    status_code = 400
    kind = 'invalid_input'


class NotFound(PortalError):
    status_code = 404
    kind = 'not_found'


class ServerConfig(PortalError):
    status_code = 500
    kind = 'server_config'


class UpstreamFailure(PortalError):
    status_code = 502
    kind = 'upstream'


class InternalError(PortalError):
    status_code = 500
    kind = 'internal'


def handle_portal_error(err: PortalError):
    if err.status_code >= 500:
        logger.error('%s: %s (%s)', err.__class__.__name__, err.message, err.details)
    else:
        logger.info('%s: %s', err.__class__.__name__, err.message)
    return jsonify(err.to_dict()), err.status_code


# ---------------------------------------------------------------------------
# Error-event channel
# ---------------------------------------------------------------------------

_signals = Namespace()
error_reported = _signals.signal('error-reported')


@dataclass
class ErrorRecord:
    kind: str
    message: str
    title: str = 'Error'
    operation: Optional[str] = None
    path: Optional[str] = None
    details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def report_error(record: ErrorRecord) -> None:
    sender = current_app._get_current_object() if has_app_context() else None
    error_reported.send(sender, record=record)


def install_error_listener(app) -> None:
    """Connect the one listener that renders error records for ``app``.

    The signal holds the listener weakly; ``app.extensions`` keeps it alive
    for as long as the app is.
    """

    def _render(sender, record: ErrorRecord, **extra):
        logger.warning('[%s] %s op=%s path=%s details=%s',
                       record.kind, record.message, record.operation, record.path, record.details)
        if has_request_context():
            flash(f'{record.title}: {record.message}', 'danger')

    error_reported.connect(_render, sender=app)
    app.extensions['error_listener'] = _render
