"""Form submission actions: validate a posted form and append one document.

Each action returns a ``FormState`` for display. There is no idempotency key:
submitting the same form twice stores two documents.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from google.api_core.exceptions import GoogleAPIError

from institute import firestore_dao as dao
from institute.errors import ErrorRecord, report_error

logger = logging.getLogger(__name__)


@dataclass
class FormState:
    message: str
    fields: Optional[Dict[str, str]] = None
    issues: List[str] = field(default_factory=list)
    is_success: bool = False


def _issues(form) -> List[str]:
    return [message for messages in form.errors.values() for message in messages]


def _fields(form) -> Dict[str, str]:
    return {
        name: f.data for name, f in form._fields.items()
        if name not in ('csrf_token', 'submit') and isinstance(f.data, str)
    }


def _store_failed(operation: str, err: Exception, message: str) -> FormState:
    logger.exception('Error submitting %s form', operation)
    report_error(ErrorRecord(
        kind='database',
        title='Submission Failed',
        message=message,
        operation=operation,
        details=str(err),
    ))
    return FormState(message=message, is_success=False)


def submit_contact_form(form) -> FormState:
    if not form.validate():
        return FormState(message='Invalid form data.', fields=_fields(form), issues=_issues(form))

    try:
        dao.create_contact({
            'name': form.name.data,
            'email': form.email.data,
            'message': form.message.data,
        })
    except GoogleAPIError as e:
        return _store_failed('contact', e, 'An error occurred. Please try again later.')

    return FormState(message='Thank you for your message! We will get back to you soon.', is_success=True)


def submit_enrollment_form(form) -> FormState:
    if not form.validate():
        return FormState(
            message='Invalid form data. Please check the fields and try again.',
            fields=_fields(form),
            issues=_issues(form),
        )

    try:
        dao.create_enrollment({
            'name': form.name.data,
            'email': form.email.data,
            'phone': form.phone.data,
            'message': form.message.data or '',
            'isRead': False,
        })
    except GoogleAPIError as e:
        return _store_failed(
            'enrollment', e,
            'Something went wrong on our end. Please try again later or contact us directly on WhatsApp.'
        )

    return FormState(
        message='Thank you for your application! We have received your details and will contact you shortly.',
        is_success=True,
    )


def submit_review_form(form) -> FormState:
    if not form.validate():
        return FormState(message='Invalid data. Please check your input.', issues=_issues(form))

    try:
        dao.create_review({
            'name': form.name.data,
            'rating': form.rating.data,
            'comment': form.comment.data,
            'isApproved': False,
        })
    except GoogleAPIError as e:
        return _store_failed('review', e, 'An error occurred while submitting your review. Please try again.')

    return FormState(message='Thank you for your review! It has been submitted for approval.', is_success=True)
