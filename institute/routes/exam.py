import logging

from flask import Blueprint, render_template, redirect, url_for, flash, abort
from google.api_core.exceptions import GoogleAPIError

from institute.decorators import auth_required, get_current_user
from institute import firestore_dao as dao
from institute.errors import ErrorRecord, report_error
from institute.forms import CertificateVerifyForm, ExamRegistrationForm, ExamStartForm, ResultLookupForm
from institute.models import ExamRegistration, ExamResult, MockTest
from institute.services.scoring import rank_of

logger = logging.getLogger(__name__)

bp = Blueprint('exam', __name__)


@bp.route('/exam')
def index():
    tests = [MockTest.from_dict(t, t['id']) for t in dao.get_student_exam_tests()]
    user = get_current_user()

    registration = None
    taken = {}
    if user.is_authenticated:
        reg_doc = dao.get_exam_registration(user.uid)
        if reg_doc:
            registration = ExamRegistration.from_dict(reg_doc, reg_doc['id'])
            test_ids = {t.id for t in tests}
            for r in dao.get_results_by_registration(registration.registration_number):
                if r.get('testId') in test_ids:
                    taken[r['testId']] = r['id']

    return render_template('exam/index.html', tests=tests, registration=registration, taken=taken)


@bp.route('/exam/register', methods=['GET', 'POST'])
@auth_required
def register():
    user = get_current_user()
    existing = dao.get_exam_registration(user.uid)
    if existing:
        return render_template('exam/register.html', form=None,
                               registration=ExamRegistration.from_dict(existing, existing['id']))

    form = ExamRegistrationForm()
    form.course.choices = [(c.get('title', ''), c.get('title', '')) for c in dao.get_courses()]

    if form.validate_on_submit():
        try:
            registration_number = dao.next_registration_number()
            registration = ExamRegistration(
                registration_number=registration_number,
                full_name=form.full_name.data,
                father_name=form.father_name.data,
                phone=form.phone.data,
                email=form.email.data,
                dob=form.dob.data.strftime('%Y-%m-%d'),
                gender=form.gender.data,
                course=form.course.data,
                address=form.address.data,
                city=form.city.data,
                state=form.state.data,
                pin_code=form.pin_code.data,
            )
            dao.create_exam_registration(user.uid, registration.to_dict())
        except GoogleAPIError as e:
            logger.exception('Registration failed for %s', user.uid)
            report_error(ErrorRecord(
                kind='database',
                title='Registration Failed',
                message='An unexpected error occurred. Please try again.',
                operation='create',
                path=f'examRegistrations/{user.uid}',
                details=str(e),
            ))
            return render_template('exam/register.html', form=form, registration=None)

        flash(f'Registration Successful! Your registration number is {registration_number}. '
              'Please save it for future reference.', 'success')
        return redirect(url_for('exam.register'))

    return render_template('exam/register.html', form=form, registration=None)


@bp.route('/exam/start', methods=['GET', 'POST'])
def start():
    form = ExamStartForm()
    student = None
    tests = []

    if form.validate_on_submit():
        reg_doc = dao.get_registration_by_number(form.registration_number.data.strip().upper())
        if reg_doc is None:
            flash('Not Found: No student found with this registration number.', 'danger')
        else:
            student = ExamRegistration.from_dict(reg_doc, reg_doc['id'])
            tests = [MockTest.from_dict(t, t['id']) for t in dao.get_student_exam_tests()]

    return render_template('exam/start.html', form=form, student=student, tests=tests)


@bp.route('/exam/result', methods=['GET', 'POST'])
def result_lookup():
    form = ResultLookupForm()

    if form.validate_on_submit():
        registration_number = form.registration_number.data.strip().upper()
        try:
            result = dao.get_latest_result_by_registration(registration_number)
        except GoogleAPIError as e:
            report_error(ErrorRecord(
                kind='database',
                message='An unexpected error occurred while fetching your result.',
                operation='list',
                path='examResults',
                details=str(e),
            ))
            return render_template('exam/result_lookup.html', form=form)

        if result is None:
            flash('Result Not Found: No result found for this registration number. '
                  'Please check the number or try again later.', 'danger')
        else:
            return redirect(url_for('exam.result_detail', result_id=result['id']))

    return render_template('exam/result_lookup.html', form=form)


@bp.route('/exam/result/<result_id>')
def result_detail(result_id):
    doc = dao.get_exam_result(result_id)
    if doc is None:
        abort(404)
    result = ExamResult.from_dict(doc, doc['id'])

    test_doc = dao.get_mock_test(result.test_id) if result.test_id else None
    test = MockTest.from_dict(test_doc, test_doc['id']) if test_doc else None
    if test is None:
        logger.warning('Associated test %s not found for result %s', result.test_id, result_id)

    rank = rank_of(result.id, dao.get_results_by_test(result.test_id))

    return render_template('exam/result_detail.html', result=result, test=test, rank=rank)


@bp.route('/verify-certificate', methods=['GET', 'POST'])
def verify_certificate():
    form = CertificateVerifyForm()
    result = None
    not_found = False

    if form.validate_on_submit():
        doc = dao.get_result_by_certificate_id(form.certificate_id.data.strip())
        if doc is None:
            not_found = True
        else:
            result = ExamResult.from_dict(doc, doc['id'])

    return render_template('verify_certificate.html', form=form, result=result, not_found=not_found)
