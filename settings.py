import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'devsecret')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///' + os.path.join(BASE_DIR, 'ecofinds.db'))
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)

    # Media
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(BASE_DIR, 'static', 'uploads'))
    UPLOAD_URL_PREFIX = '/static/uploads/'
    PLACEHOLDER_IMAGE = '/static/images/placeholder-product.svg'
    MAX_IMAGE_COUNT = 5
    MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
    ALLOWED_IMAGE_TYPES = {'jpeg', 'jpg', 'png', 'gif', 'webp'}

    PRODUCT_LIST_LIMIT = 50
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
