import datetime

import jwt
import pytest

from partyhub.errors import AuthorizationError, ValidationError
from partyhub.models import Admin
from partyhub.services import auth

from conftest import emit


def test_register_issues_verifiable_token(flask_app):
    admin = auth.register_admin('Host@Example.com ', 'secret123')
    assert admin.email == 'host@example.com'
    assert admin.password_hash != 'secret123'
    claims = auth.verify_token(auth.issue_token(admin))
    assert claims['id'] == admin.id
    assert claims['email'] == 'host@example.com'


@pytest.mark.parametrize('email,password', [
    ('not-an-email', 'secret123'),
    ('host@example.com', 'short'),
    ('host@example.com', ''),
    (None, 'secret123'),
])
def test_register_rejects_bad_credentials(flask_app, email, password):
    with pytest.raises(ValidationError):
        auth.register_admin(email, password)
    assert Admin.query.count() == 0


def test_register_rejects_duplicate_email(flask_app):
    auth.register_admin('host@example.com', 'secret123')
    with pytest.raises(ValidationError):
        auth.register_admin('host@example.com', 'another-pass')


def test_login_checks_password(flask_app):
    auth.register_admin('host@example.com', 'secret123')
    assert auth.authenticate_admin('host@example.com', 'secret123').email == 'host@example.com'
    with pytest.raises(AuthorizationError):
        auth.authenticate_admin('host@example.com', 'wrong-password')
    with pytest.raises(AuthorizationError):
        auth.authenticate_admin('nobody@example.com', 'secret123')


def test_expired_token_is_rejected(flask_app):
    expired = jwt.encode(
        {'id': 1, 'email': 'a@b.co',
         'exp': datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(minutes=1)},
        flask_app.config['JWT_SECRET'],
        algorithm='HS256',
    )
    with pytest.raises(AuthorizationError) as excinfo:
        auth.verify_token(expired)
    assert excinfo.value.message == 'Token expired'


def test_token_signed_with_other_secret_is_rejected(flask_app):
    forged = jwt.encode({'id': 1, 'email': 'a@b.co'}, 'other-secret', algorithm='HS256')
    with pytest.raises(AuthorizationError):
        auth.verify_token(forged)
    with pytest.raises(AuthorizationError):
        auth.verify_token(None)


def test_socket_login_round_trip(sio_client):
    ack = emit(sio_client, 'adminRegister', {'email': 'host@example.com', 'password': 'secret123'})
    assert ack['success'] is True
    assert ack['admin']['email'] == 'host@example.com'

    ack = emit(sio_client, 'adminLogin', {'email': 'host@example.com', 'password': 'secret123'})
    assert ack['success'] is True
    assert auth.verify_token(ack['token'])['email'] == 'host@example.com'

    ack = emit(sio_client, 'adminLogin', {'email': 'host@example.com', 'password': 'nope'})
    assert ack == {'success': False, 'error': 'Invalid credentials'}

    ack = emit(sio_client, 'adminRegister', {'email': 'host@example.com', 'password': 'secret123'})
    assert ack == {'success': False, 'error': 'This email is already registered'}
