import logging

from flask import Flask, render_template
from flask_socketio import SocketIO
from flask_wtf.csrf import CSRFProtect
from config import Config

socketio = SocketIO()
csrf = CSRFProtect()


def create_app(config_class=Config, db=None, auth=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    csrf.init_app(app)

    # Firestore client is owned by the process and shared by reference
    if db is None:
        from institute.firebase_init import init_firebase
        db = init_firebase(app.config)
    app.extensions['firestore'] = db
    if auth is not None:
        app.extensions['firebase_auth'] = auth

    from institute.errors import PortalError, handle_portal_error, install_error_listener
    app.register_error_handler(PortalError, handle_portal_error)
    install_error_listener(app)

    @app.errorhandler(404)
    def page_not_found(e):
        return render_template('errors/404.html'), 404

    # CORS origins
    allowed_origins = []
    cors_origins = app.config.get('CORS_ALLOWED_ORIGINS', '')
    if cors_origins:
        for origin in cors_origins.split(','):
            origin = origin.strip()
            if origin:
                allowed_origins.append(origin)

    # Handlers must be declared before init_app so every app instance gets them
    from institute import events  # noqa: F401

    socketio.init_app(
        app,
        cors_allowed_origins=allowed_origins if allowed_origins else None,
        async_mode=app.config.get('SOCKETIO_ASYNC_MODE', 'eventlet')
    )

    from institute.decorators import load_current_user, get_current_user

    @app.before_request
    def before_request():
        load_current_user()

    @app.context_processor
    def inject_current_user():
        return {'current_user': get_current_user()}

    # Register blueprints
    from institute.routes import (
        api, auth as auth_routes, blog, content, exam, learn, main, mock_tests
    )
    app.register_blueprint(main.bp)
    app.register_blueprint(auth_routes.bp)
    app.register_blueprint(api.bp)
    app.register_blueprint(content.bp)
    app.register_blueprint(blog.bp)
    app.register_blueprint(exam.bp)
    app.register_blueprint(mock_tests.bp)
    app.register_blueprint(learn.bp)
    csrf.exempt(api.bp)

    return app
