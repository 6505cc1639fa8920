"""Admin identities and the signed tokens that stand for them.

Tokens are HS256 JWTs carrying the admin ``id`` and ``email`` and expire
after ``TOKEN_TTL_HOURS``. Every admin-scoped event verifies the token again;
nothing about a login is kept server side.
"""

import datetime
import re
from typing import Any, Dict, Optional

import jwt
from flask import current_app

from partyhub import db
from partyhub.errors import AuthorizationError, ValidationError
from partyhub.models import Admin, Game

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 6


def _validate_credentials(email: Any, password: Any, registering: bool) -> None:
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        raise ValidationError('Invalid email')
    if not isinstance(password, str) or not password:
        raise ValidationError('Password is required')
    if registering and len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')


def issue_token(admin: Admin) -> str:
    cfg = current_app.config
    payload = {
        'id': admin.id,
        'email': admin.email,
        'exp': datetime.datetime.now(datetime.timezone.utc)
        + datetime.timedelta(hours=int(cfg.get('TOKEN_TTL_HOURS', 24))),
    }
    return jwt.encode(payload, cfg['JWT_SECRET'], algorithm='HS256')


def verify_token(token: Optional[str]) -> Dict[str, Any]:
    if not token:
        raise AuthorizationError('Missing token')
    try:
        claims = jwt.decode(token, current_app.config['JWT_SECRET'], algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        raise AuthorizationError('Token expired')
    except jwt.InvalidTokenError:
        raise AuthorizationError('Invalid token')
    if 'id' not in claims:
        raise AuthorizationError('Invalid token')
    return claims


def register_admin(email: Any, password: Any) -> Admin:
    _validate_credentials(email, password, registering=True)
    email = email.strip().lower()
    if Admin.query.filter_by(email=email).first():
        raise ValidationError('This email is already registered')
    admin = Admin(email=email)
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    current_app.logger.info(f"[register] admin={admin.id}")
    return admin


def authenticate_admin(email: Any, password: Any) -> Admin:
    _validate_credentials(email, password, registering=False)
    admin = Admin.query.filter_by(email=email.strip().lower()).first()
    if not admin or not admin.check_password(password):
        raise AuthorizationError('Invalid credentials')
    return admin


def require_owner(token: Optional[str], game: Optional[Game]) -> Dict[str, Any]:
    """Verify the token and that its admin owns ``game``."""
    claims = verify_token(token)
    if game is None or game.admin_id is None or game.admin_id != claims['id']:
        raise AuthorizationError('Not authorized or game not found')
    return claims
