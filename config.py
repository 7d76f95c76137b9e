# config.py
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
DATABASE_PATH = os.path.join(BASE_DIR, 'food_donation.db')


class Config:
    """Default configuration, overridable from the environment"""
    SECRET_KEY = os.getenv('SECRET_KEY', 'food-donation-secret-key')

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', f'sqlite:///{DATABASE_PATH}')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB, base64 images included

    # Image classification
    CLASSIFIER_BACKEND = os.getenv('CLASSIFIER_BACKEND', 'huggingface')  # huggingface, mock
    HUGGING_FACE_ACCESS_TOKEN = os.getenv('HUGGING_FACE_ACCESS_TOKEN', '')
    HF_API_URL = os.getenv('HF_API_URL', 'https://api-inference.huggingface.co/models')
    CLASSIFIER_MODEL = os.getenv('CLASSIFIER_MODEL', 'google/vit-base-patch16-224')
    CLASSIFIER_TIMEOUT = float(os.getenv('CLASSIFIER_TIMEOUT', '20'))

    RECENT_ACTIVITY_LIMIT = int(os.getenv('RECENT_ACTIVITY_LIMIT', '10'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    CLASSIFIER_BACKEND = 'mock'
    HUGGING_FACE_ACCESS_TOKEN = ''
    LOG_LEVEL = 'DEBUG'
