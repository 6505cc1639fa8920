import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///partyhub.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Admin identity tokens
    JWT_SECRET = os.environ.get('JWT_SECRET') or 'your-secret-key'
    TOKEN_TTL_HOURS = int(os.environ.get('TOKEN_TTL_HOURS', '24'))
    # Scoring
    QUIZ_CORRECT_POINTS = int(os.environ.get('QUIZ_CORRECT_POINTS', '100'))
    VOTE_TARGET_POINTS = int(os.environ.get('VOTE_TARGET_POINTS', '1'))
    # Per-question default time limit (seconds)
    DEFAULT_TIME_LIMIT = int(os.environ.get('DEFAULT_TIME_LIMIT', '30'))
    GAME_CODE_LENGTH = int(os.environ.get('GAME_CODE_LENGTH', '6'))
    # Transport
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080',
        ).split(',') if o.strip()
    ]
    # Players scan this (as a QR code) to land on the join screen
    JOIN_URL_TEMPLATE = os.environ.get('JOIN_URL_TEMPLATE', 'http://localhost:5173/play/{code}')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
