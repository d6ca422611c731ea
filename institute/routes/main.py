from datetime import date

from flask import Blueprint, Response, current_app, jsonify, render_template, request
from institute.decorators import auth_required, get_current_user
from institute import firestore_dao as dao
from institute.models import ExamResult, LearningModule, Review
from institute.progress import course_progress

bp = Blueprint('main', __name__)

SITEMAP_ROUTES = [
    '',
    '/about',
    '/courses',
    '/blog',
    '/career',
    '/resources',
    '/contact',
    '/privacy-policy',
    '/learn',
    '/mock-tests',
    '/exam',
    '/exam/register',
    '/exam/result',
    '/verify-certificate',
    '/reviews',
]


def _sitemap_priority(route):
    if route == '':
        return '1.0'
    if 'privacy' in route or 'terms' in route:
        return '0.3'
    return '0.8'


@bp.route('/health')
def health():
    return jsonify({'status': 'ok'}), 200


@bp.route('/')
def index():
    if request.args.get('health') == '1':
        return 'OK', 200

    announcement = dao.get_site_setting('announcement')
    if announcement and not announcement.get('isVisible'):
        announcement = None
    popup = dao.get_site_setting('salesPopup')
    if popup and not popup.get('isVisible'):
        popup = None

    featured_courses = dao.get_featured_courses()
    testimonials = [Review.from_dict(r, r['id']) for r in dao.get_approved_reviews(limit=6)]

    return render_template('index.html',
                           announcement=announcement,
                           popup=popup,
                           featured_courses=featured_courses,
                           testimonials=testimonials)


@bp.route('/about')
def about():
    return render_template('about.html')


@bp.route('/career')
def career():
    return render_template('career.html')


@bp.route('/privacy-policy')
def privacy_policy():
    return render_template('privacy_policy.html')


@bp.route('/sitemap.xml')
def sitemap():
    site_url = current_app.config.get('SITE_URL', '').rstrip('/')
    today = date.today().isoformat()
    entries = []
    for route in SITEMAP_ROUTES:
        entries.append(
            '  <url>\n'
            f'    <loc>{site_url}{route}</loc>\n'
            f'    <lastmod>{today}</lastmod>\n'
            '    <changefreq>monthly</changefreq>\n'
            f'    <priority>{_sitemap_priority(route)}</priority>\n'
            '  </url>'
        )
    xml = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        + '\n'.join(entries) +
        '\n</urlset>\n'
    )
    return Response(xml, mimetype='application/xml')


@bp.route('/profile')
@auth_required
def profile():
    user = get_current_user()

    registration = dao.get_exam_registration(user.uid)
    exam_results = []
    if registration and registration.get('registrationNumber'):
        exam_results = [
            ExamResult.from_dict(r, r['id'])
            for r in dao.get_results_by_registration(registration['registrationNumber'])
        ]
    practice_results = dao.get_test_results_by_user(user.uid)

    progress = dao.get_user_progress(user.uid)
    learning = []
    for module_doc in dao.get_learning_modules():
        if module_doc['id'] not in progress:
            continue
        module = LearningModule.from_tree(dao.get_learning_module(module_doc['id']))
        learning.append((module, course_progress(progress, module)))

    return render_template('profile.html',
                           registration=registration,
                           exam_results=exam_results,
                           practice_results=practice_results,
                           learning=learning)

