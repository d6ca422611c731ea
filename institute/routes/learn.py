from flask import Blueprint, render_template, jsonify, abort
from institute.decorators import auth_required, get_current_user
from institute import firestore_dao as dao
from institute.models import LearningModule
from institute.progress import course_progress, record_last_visited, toggle_lesson

bp = Blueprint('learn', __name__, url_prefix='/learn')


def _load_module(slug):
    module_doc = dao.get_learning_module(slug)
    if module_doc is None:
        abort(404)
    return LearningModule.from_tree(module_doc)


@bp.route('/')
def index():
    modules = [LearningModule.from_dict(m, m['id']) for m in dao.get_learning_modules()]
    return render_template('learn/index.html', modules=modules)


@bp.route('/<slug>')
def module_page(slug):
    module = _load_module(slug)
    user = get_current_user()
    progress = dao.get_user_progress(user.uid) if user.is_authenticated else {}
    return render_template('learn/module.html',
                           module=module,
                           progress=course_progress(progress, module),
                           completed=(progress.get(module.id) or {}).get('completedLessons') or [])


@bp.route('/<slug>/<lesson_slug>')
def lesson_page(slug, lesson_slug):
    module = _load_module(slug)
    chapter, lesson, prev_lesson, next_lesson = module.find_lesson(lesson_slug)
    if lesson is None:
        abort(404)

    user = get_current_user()
    completed = []
    if user.is_authenticated:
        record_last_visited(user.uid, module.id, lesson.id)
        progress = dao.get_user_progress(user.uid)
        completed = (progress.get(module.id) or {}).get('completedLessons') or []

    return render_template('learn/lesson.html',
                           module=module,
                           chapter=chapter,
                           lesson=lesson,
                           prev_lesson=prev_lesson,
                           next_lesson=next_lesson,
                           is_completed=lesson.id in completed)


@bp.route('/<slug>/<lesson_slug>/complete', methods=['POST'])
@auth_required
def toggle_complete(slug, lesson_slug):
    module = _load_module(slug)
    _, lesson, _, _ = module.find_lesson(lesson_slug)
    if lesson is None:
        return jsonify({'error': 'Lesson not found'}), 404

    user = get_current_user()
    completed = toggle_lesson(user.uid, module.id, lesson.id)
    progress = course_progress({module.id: {'completedLessons': completed}}, module)
    return jsonify({
        'success': True,
        'completed': lesson.id in completed,
        'progress': progress.to_dict(),
    })
