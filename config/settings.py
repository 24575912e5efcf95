import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    # Database
    MONGO_URI = os.getenv('MONGO_URI', 'mongodb://localhost:27017/peer_evaluation')
    DB_NAME = os.getenv('DB_NAME', 'peer_evaluation')

    # Application
    SECRET_KEY = os.getenv('SECRET_KEY', 'your-secret-key-here')
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', 16 * 1024 * 1024))  # 16MB max upload
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    PORT = int(os.getenv('PORT', 5000))

    # QR bundle generation
    BUNDLE_FAILURE_POLICY = os.getenv('BUNDLE_FAILURE_POLICY', 'abort')  # 'abort' or 'skip'
    BUNDLE_DEADLINE_SECONDS = float(os.getenv('BUNDLE_DEADLINE_SECONDS', 0))  # 0 = no limit
    BUNDLE_STUDENT_TIMEOUT_SECONDS = float(os.getenv('BUNDLE_STUDENT_TIMEOUT_SECONDS', 0))
    QR_BOX_SIZE = int(os.getenv('QR_BOX_SIZE', 10))

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(Settings, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

settings = Settings()
