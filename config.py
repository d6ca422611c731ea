import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.environ.get('SESSION_SECRET') or os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None

    FIREBASE_PROJECT_ID = os.environ.get('FIREBASE_PROJECT_ID')
    FIREBASE_WEB_API_KEY = os.environ.get('FIREBASE_WEB_API_KEY')

    ONESIGNAL_APP_ID = os.environ.get('ONESIGNAL_APP_ID')
    ONESIGNAL_REST_API_KEY = os.environ.get('ONESIGNAL_REST_API_KEY')
    ONESIGNAL_API_URL = os.environ.get('ONESIGNAL_API_URL', 'https://onesignal.com/api/v1/notifications')

    SITE_URL = os.environ.get('NEXT_PUBLIC_SITE_URL') or os.environ.get('SITE_URL') or 'https://mtechitinstitute.in'
    CERTIFICATE_LOGO_URL = os.environ.get('CERTIFICATE_LOGO_URL')

    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE', 'eventlet')
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
