# routes/helpers.py
# Общие помощники для маршрутов

from flask import request
from repository import get_repository
from logic import access
from logic.errors import ValidationError
from routes.auth import current_user


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Ожидается JSON-объект.')
    return data


def load_event(event_id, resource, action):
    """Загружает мероприятие и проверяет, что текущий пользователь может выполнить действие."""
    repo = get_repository()
    event = repo.get_event(event_id)
    slots = repo.list_slots(event.id) if current_user().role == 'judge' else ()
    access.ensure_event_access(current_user(), event, resource, action, slots=slots)
    return event
