import os
import logging

import firebase_admin
from firebase_admin import credentials, firestore, auth
from flask import current_app

logger = logging.getLogger(__name__)


def init_firebase(app_config=None):
    """Build the process-wide Firestore client.

    The Firebase app is initialised at most once per process; callers keep the
    returned client and share it by reference (``create_app`` stores it on
    ``app.extensions``).
    """
    try:
        fb_app = firebase_admin.get_app()
    except ValueError:
        cred_path = os.environ.get('GOOGLE_APPLICATION_CREDENTIALS', './firebase-service-account.json')

        if os.path.exists(cred_path):
            cred = credentials.Certificate(cred_path)
        else:
            cred = credentials.ApplicationDefault()

        options = {}
        project_id = (app_config or {}).get('FIREBASE_PROJECT_ID')
        if project_id:
            options['projectId'] = project_id

        fb_app = firebase_admin.initialize_app(cred, options=options if options else None)
        logger.info('Firebase app initialised (project=%s)', project_id or 'default')

    return firestore.client(app=fb_app)


def get_db():
    return current_app.extensions['firestore']


def get_auth():
    return current_app.extensions.get('firebase_auth', auth)
