import logging

from flask import Blueprint, request
from flask_login import login_user, logout_user, login_required, current_user
from sqlalchemy import or_

from gymdesk.exceptions import AuthenticationError, InvalidInputError
from gymdesk.extensions import limiter
from gymdesk.models import User
from gymdesk.utils.responses import success_response

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


@auth_bp.route('/login', methods=['POST'])
@limiter.limit('10 per minute')
def login():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or data.get('email') or '').strip()
    password = data.get('password')

    if not username or not password:
        raise InvalidInputError('Username and password required', 'VALIDATION_ERROR')

    user = User.query.filter(or_(User.username == username, User.email == username.lower())).first()
    if user is None or not user.check_password(password):
        logger.warning('Failed login attempt for %r', username)
        raise AuthenticationError('Invalid credentials', 'INVALID_CREDENTIALS')

    login_user(user)
    logger.info('User %s logged in (facility %s, role %s)', user.id, user.facility_id, user.role)
    return success_response({'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    user_id = current_user.id
    logout_user()
    logger.info('User %s logged out', user_id)
    return success_response({'message': 'Logged out'})


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return success_response({'user': current_user.to_dict()})
