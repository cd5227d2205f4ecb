import tempfile

from .base import *

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

ALLOWED_HOSTS = ['testserver']

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

MEDIA_ROOT = tempfile.mkdtemp(prefix='foodshare-test-media-')

SAVE_FOOD_URL = 'http://testserver/api/save-food'
SAVE_FOOD_TIMEOUT = 5
