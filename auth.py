# auth.py - token authentication
import functools
import secrets

from flask import Blueprint, g, jsonify, request
from werkzeug.security import check_password_hash, generate_password_hash

from errors import AuthenticationError, ValidationError
from models import db, User

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _bearer_token():
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def login_required(view):
    """Resolve the bearer token to a user and expose it as g.current_user"""
    @functools.wraps(view)
    def wrapped_view(**kwargs):
        token = _bearer_token()
        if not token:
            raise AuthenticationError("Unauthorized")

        user = User.query.filter_by(api_token=token).first()
        if user is None:
            raise AuthenticationError("Unauthorized")

        g.current_user = user
        return view(**kwargs)
    return wrapped_view


def register_user(email, password, full_name=None):
    email = (email or '').strip().lower()
    if not email or not password:
        raise ValidationError("Email and password are required")
    if User.query.filter_by(email=email).first():
        raise ValidationError("Email already registered")

    user = User(
        email=email,
        full_name=(full_name or '').strip() or email.split('@')[0],
        password_hash=generate_password_hash(password),
        api_token=secrets.token_urlsafe(32)
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email, password):
    user = User.query.filter_by(email=(email or '').strip().lower()).first()
    if user is None or not check_password_hash(user.password_hash, password or ''):
        raise AuthenticationError("Invalid email or password")

    if not user.api_token:
        user.api_token = secrets.token_urlsafe(32)
        db.session.commit()
    return user


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    user = register_user(data.get('email'), data.get('password'), data.get('full_name'))
    return jsonify({"user": user.to_dict(), "api_token": user.api_token}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = authenticate(data.get('email'), data.get('password'))
    return jsonify({"user": user.to_dict(), "api_token": user.api_token})
