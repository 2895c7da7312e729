# routes/auth.py
# Маршруты для авторизации

import logging
from functools import wraps

from flask import Blueprint, request, session, jsonify
from repository import get_repository

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def current_user():
    return get_repository().get_user(session.get('user_id'))


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_user() is None:
            # Пользователь мог быть удален, пока сессия жила
            session.clear()
            return jsonify({'message': 'Unauthorized'}), 401
        return f(*args, **kwargs)
    return decorated_function


@auth_bp.route('/api/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    if not username or not password:
        return jsonify({'message': 'Введите логин и пароль.'}), 400

    user = get_repository().get_user_by_username(username)
    if user is None or not user.check_password(password):
        logger.warning('Неудачная попытка входа: %s', username)
        return jsonify({'message': 'Неверный логин или пароль.'}), 401

    # Очищаем старую сессию для безопасности
    session.clear()
    session['user_id'] = user.id
    return jsonify(user.to_dict())


@auth_bp.route('/api/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify({'message': 'Вы успешно вышли из системы.'})


@auth_bp.route('/api/me')
@login_required
def me():
    return jsonify(current_user().to_dict())
