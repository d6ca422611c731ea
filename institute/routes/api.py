import io
import logging

from flask import Blueprint, current_app, jsonify, request, send_file

from institute import firestore_dao as dao
from institute.errors import InternalError, InvalidInput, NotFound, PortalError
from institute.models import ExamResult
from institute.services.certificate import build_certificate_data, certificate_filename, render_certificate_pdf
from institute.services.notifications import notify_student

logger = logging.getLogger(__name__)

bp = Blueprint('api', __name__, url_prefix='/api')


@bp.route('/notify-student', methods=['POST'])
def notify():
    payload = request.get_json(silent=True)
    logger.info('Notification requested for student %s', (payload or {}).get('studentId'))
    try:
        body = notify_student(payload)
    except PortalError:
        raise
    except Exception as e:
        logger.exception('Unexpected error while sending notification')
        raise InternalError('Failed to send notification.', details=str(e))
    return jsonify({'success': True, 'response': body})


@bp.route('/download-certificate')
def download_certificate():
    result_id = request.args.get('resultId', '').strip()
    if not result_id:
        raise InvalidInput('Result ID is required')

    doc = dao.get_exam_result(result_id)
    if doc is None:
        raise NotFound('Exam result not found')

    result = ExamResult.from_dict(doc, doc['id'])
    if not result.certificate_id:
        raise NotFound('Certificate ID is missing for this result')

    try:
        data = build_certificate_data(result)
        pdf_bytes = render_certificate_pdf(data, logo_url=current_app.config.get('CERTIFICATE_LOGO_URL'))
    except Exception as e:
        logger.exception('Certificate generation error for result %s', result_id)
        raise InternalError('Failed to generate certificate', details=str(e))

    return send_file(
        io.BytesIO(pdf_bytes),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=certificate_filename(result.student_name),
    )
