"""
Configuration utilities for the Event Media API.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

UPDATE_POLICIES = ('append', 'replace')


def _env_list(name, default):
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(',') if item.strip()]


class Config:
    """Configuration object for application-wide settings.

    Values are read from the environment when the object is created; keyword
    arguments override them (handy for tests and scripts).
    """

    def __init__(self, **overrides):
        # MongoDB settings
        self.MONGODB_URI = os.getenv('MONGODB_URI', 'mongodb://localhost:27017')
        self.MONGODB_DB = os.getenv('MONGODB_DB', 'event_media')

        # JWT settings
        self.JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', '')
        self.JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
        self.JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRE_MINUTES', 60))

        # Media storage settings
        self.UPLOAD_DIR = os.getenv('UPLOAD_DIR', 'uploads')
        self.MEDIA_URL_PREFIX = os.getenv('MEDIA_URL_PREFIX', 'uploads')
        self.MEDIA_MAX_FILES_PER_FIELD = int(os.getenv('MEDIA_MAX_FILES_PER_FIELD', 10))
        self.MEDIA_MAX_REQUEST_BYTES = int(os.getenv('MEDIA_MAX_REQUEST_BYTES', 100 * 1024 * 1024))

        # 'append' keeps existing media on update, 'replace' swaps it out
        self.EVENT_UPDATE_POLICY = os.getenv('EVENT_UPDATE_POLICY', 'append').strip().lower()

        # Server settings
        self.CORS_ORIGINS = _env_list('CORS_ORIGINS', '*')
        self.HOST = os.getenv('HOST', '0.0.0.0')
        self.PORT = int(os.getenv('PORT', 5000))
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown config option: {key}")
            setattr(self, key, value)

    def validate(self):
        """Raise RuntimeError when a required setting is missing or invalid."""
        if not self.MONGODB_URI or not self.MONGODB_DB:
            raise RuntimeError("MONGODB_URI and MONGODB_DB must be set in environment variables")
        if not self.JWT_SECRET_KEY or not self.JWT_SECRET_KEY.strip():
            raise RuntimeError("JWT_SECRET_KEY must be set in environment variables")
        if self.EVENT_UPDATE_POLICY not in UPDATE_POLICIES:
            raise RuntimeError(
                f"EVENT_UPDATE_POLICY must be one of {', '.join(UPDATE_POLICIES)}, "
                f"got '{self.EVENT_UPDATE_POLICY}'"
            )
        if self.JWT_ACCESS_TOKEN_EXPIRE_MINUTES < 1:
            raise RuntimeError("JWT_ACCESS_TOKEN_EXPIRE_MINUTES must be at least 1")
        if not self.MEDIA_URL_PREFIX.strip('/\\'):
            raise RuntimeError("MEDIA_URL_PREFIX must not be empty")
        if self.MEDIA_MAX_FILES_PER_FIELD < 1:
            raise RuntimeError("MEDIA_MAX_FILES_PER_FIELD must be at least 1")
        if self.MEDIA_MAX_REQUEST_BYTES < 1:
            raise RuntimeError("MEDIA_MAX_REQUEST_BYTES must be at least 1")
        return self
