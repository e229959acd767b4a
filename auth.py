from flask import Blueprint, request, jsonify, current_app
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from models import db, User
from utils import error_response

auth = Blueprint('auth', __name__, url_prefix='/api/auth')

TOKEN_SALT = 'habit-tracker-auth'

def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)

def issue_token(user):
    return _serializer().dumps({'id': user.id})

def token_from_request(req):
    # The web client sends x-auth-token; Bearer is accepted for other callers
    token = req.headers.get('x-auth-token')
    if token:
        return token
    auth_header = req.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header.split(' ', 1)[1].strip()
    return None

def load_user_from_request(req):
    token = token_from_request(req)
    if not token:
        return None
    try:
        data = _serializer().loads(token, max_age=current_app.config['TOKEN_MAX_AGE'])
    except SignatureExpired:
        current_app.logger.info('Rejected expired token')
        return None
    except BadSignature:
        current_app.logger.warning('Rejected token with bad signature')
        return None
    if not isinstance(data, dict) or 'id' not in data:
        return None
    return db.session.get(User, data['id'])

def _credentials():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    if not isinstance(username, str) or not isinstance(password, str):
        return None, None
    return username.strip(), password

def username_taken(username):
    return User.query.filter_by(username=username).first() is not None

def _auth_payload(user):
    return {'token': issue_token(user), 'user': user.to_dict()}

@auth.route('/register', methods=['POST'])
def register():
    username, password = _credentials()
    if not username or not password:
        return error_response('Please provide username and password')
    if len(username) > 150:
        return error_response('Username is too long')

    if username_taken(username):
        return error_response('User already exists')

    user = User(username=username, password_hash=generate_password_hash(password, method='scrypt'))
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with another registration for the same name
        db.session.rollback()
        return error_response('User already exists')
    current_app.logger.info('Registered user %s', user.id)
    return jsonify(_auth_payload(user)), 201

@auth.route('/login', methods=['POST'])
def login():
    username, password = _credentials()
    if not username or not password:
        return error_response('Please provide username and password')

    user = User.query.filter_by(username=username).first()
    if not user or not check_password_hash(user.password_hash, password):
        return error_response('Invalid credentials')
    return jsonify(_auth_payload(user))

@auth.route('/me')
@login_required
def me():
    return jsonify(current_user.to_dict())
