from flask import Blueprint, render_template, redirect, url_for, flash, request
from institute import firestore_dao as dao
from institute import actions
from institute.forms import ContactForm, EnrollmentForm, ReviewForm
from institute.models import Review

bp = Blueprint('content', __name__)


def _flash_state(state):
    flash(state.message, 'success' if state.is_success else 'danger')
    for issue in state.issues:
        flash(issue, 'warning')


@bp.route('/courses')
def courses():
    return render_template('courses.html', courses=dao.get_courses(), form=EnrollmentForm())


@bp.route('/courses/enroll', methods=['GET', 'POST'])
def enroll():
    form = EnrollmentForm()
    if request.method == 'POST':
        state = actions.submit_enrollment_form(form)
        _flash_state(state)
        if state.is_success:
            return redirect(url_for('content.courses'))
    return render_template('enroll.html', form=form, course=request.args.get('course', ''))


@bp.route('/resources')
def resources():
    return render_template('resources.html', resources=dao.get_resources())


@bp.route('/reviews', methods=['GET', 'POST'])
def reviews():
    form = ReviewForm()
    if request.method == 'POST':
        state = actions.submit_review_form(form)
        _flash_state(state)
        if state.is_success:
            return redirect(url_for('content.reviews'))

    approved = [Review.from_dict(r, r['id']) for r in dao.get_approved_reviews()]
    return render_template('reviews.html', reviews=approved, form=form)


@bp.route('/contact', methods=['GET', 'POST'])
def contact():
    form = ContactForm()
    if request.method == 'POST':
        state = actions.submit_contact_form(form)
        _flash_state(state)
        if state.is_success:
            return redirect(url_for('content.contact'))
    return render_template('contact.html', form=form)
