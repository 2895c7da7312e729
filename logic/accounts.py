# logic/accounts.py
# Судьи, разрешенные email и уведомления

import logging

from models import User, AuthorizedEmail, Notification
from .access import ensure_can_assign_role
from .errors import NotFoundError, ValidationError
from .schedule import import_rows

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES = ['English']


def _languages(value):
    if value is None:
        return list(DEFAULT_LANGUAGES)
    # В CSV языки приходят строкой через ";"
    if isinstance(value, str):
        return [part.strip() for part in value.split(';') if part.strip()] or list(DEFAULT_LANGUAGES)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return [v.strip() for v in value if v.strip()]
    raise ValidationError('Языки должны быть списком строк.', field='languages')


def apply_judge(repo, judge, payload, creating=False):
    if creating:
        username = payload.get('username')
        if not isinstance(username, str) or not username.strip():
            raise ValidationError('Логин обязателен.', field='username')
        username = username.strip()
        if repo.get_user_by_username(username):
            raise ValidationError(f'Логин "{username}" уже занят.', field='username')
        judge.username = username
        judge.role = 'judge'
        judge.set_password(payload.get('password') or 'password')
    elif payload.get('password'):
        judge.set_password(payload['password'])

    if creating or 'name' in payload:
        name = payload.get('name')
        if not isinstance(name, str) or not name.strip():
            raise ValidationError('Имя обязательно.', field='name')
        judge.name = name.strip()
    if creating or 'languages' in payload:
        judge.languages = _languages(payload.get('languages'))
    for key in ('phone', 'restrictions'):
        if key in payload:
            value = payload.get(key)
            setattr(judge, key, (value.strip() or None) if isinstance(value, str) else None)
    return judge


def require_judge(repo, judge_id):
    judge = repo.require_user(judge_id)
    if judge.role != 'judge':
        raise NotFoundError('Судья не найден.')
    return judge


def import_judges(repo, rows, limit):
    """
    Импорт судей построчно: ошибочные строки пропускаются и попадают в отчет,
    остальные создаются.
    """
    created, errors = [], []
    usernames = set()
    for row in import_rows(rows, limit=limit):
        if not isinstance(row, dict) or not row.get('name') or not row.get('username'):
            errors.append({'row': row, 'error': 'Missing required fields: name and username'})
            continue
        if row['username'] in usernames:
            errors.append({'row': row, 'error': f'Username "{row["username"]}" already exists'})
            continue
        try:
            judge = apply_judge(repo, User(), row, creating=True)
        except ValidationError as e:
            errors.append({'row': row, 'error': e.message})
            continue
        usernames.add(judge.username)
        repo.add(judge)
        created.append(judge)

    logger.info('Импорт судей: создано %s, ошибок %s', len(created), len(errors))
    return created, errors


def add_authorized_email(repo, user, payload):
    role = payload.get('role')
    ensure_can_assign_role(user, role)

    email = payload.get('email')
    if not isinstance(email, str) or '@' not in email:
        raise ValidationError('Укажите корректный email.', field='email')
    email = email.strip().lower()
    if repo.find_authorized_email(email):
        raise ValidationError(f'Адрес {email} уже добавлен.', field='email')

    name = payload.get('name')
    entry = AuthorizedEmail(
        email=email,
        role=role,
        name=name.strip() if isinstance(name, str) and name.strip() else None,
        created_by=user.id,
    )
    return repo.add(entry)


def send_notification(repo, judge_id, message, sms_enabled=False):
    """
    Сохраняет уведомление для показа в приложении.
    SMS не отправляются: при включенной настройке это только фиксируется в логе.
    """
    if not isinstance(message, str) or not message.strip():
        raise ValidationError('Текст уведомления обязателен.', field='message')
    judge = require_judge(repo, judge_id)

    notification = repo.add(Notification(judge_id=judge.id, message=message.strip()))
    repo.commit()

    if sms_enabled and judge.phone:
        logger.info('SMS-доставка не подключена, уведомление %s для %s сохранено', notification.id, judge.phone)
    else:
        logger.info('Уведомление %s сохранено для судьи %s', notification.id, judge.id)
    return notification
