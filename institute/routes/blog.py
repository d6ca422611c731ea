from flask import Blueprint, render_template, abort
from institute import firestore_dao as dao

bp = Blueprint('blog', __name__, url_prefix='/blog')


@bp.route('/')
def index():
    return render_template('blog/index.html', posts=dao.get_blog_posts(), heading='Blog')


@bp.route('/tag/<tag>')
def by_tag(tag):
    return render_template('blog/index.html', posts=dao.get_posts_by_tag(tag), heading=f'Posts tagged "{tag}"')


@bp.route('/category/<category>')
def by_category(category):
    return render_template('blog/index.html', posts=dao.get_posts_by_category(category), heading=category)


@bp.route('/<slug>')
def post(slug):
    post = dao.get_blog_post(slug)
    if not post:
        abort(404)
    related = [p for p in dao.get_posts_by_category(post.get('category', '')) if p['slug'] != slug][:3]
    return render_template('blog/post.html', post=post, related=related)
