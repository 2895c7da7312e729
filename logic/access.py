# logic/access.py
# Кто что видит и что может менять.
# Таблица (роль, ресурс, действие) -> область видимости. Нет записи - нет доступа.
# Маршруты вызывают check()/ensure_*() один раз на запрос, а списки фильтруют visible_*().

import logging

from models.user import ROLES
from .errors import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Области видимости
ALL = 'all'                 # без ограничений
MANAGED = 'managed'         # мероприятия, где event.manager_id == user.id
ASSIGNED = 'assigned'       # слоты, где судья в списке назначенных (или капитан)
JUDGE_ROLE = 'judge_role'   # только записи с ролью "judge"

RESOURCE_ACTIONS = {
    'event': ('list', 'read', 'create', 'update', 'delete', 'duplicate', 'assign_judges'),
    'station': ('list', 'create', 'update', 'delete', 'import'),
    'team': ('list', 'create', 'update', 'delete', 'import'),
    'slot': ('list', 'read', 'create', 'update', 'delete'),
    'score': ('list', 'submit'),
    'progress': ('read',),
    'results': ('read', 'export'),
    'judge': ('list', 'create', 'update', 'delete', 'import'),
    'authorized_email': ('list', 'create', 'delete'),
    'notification': ('send', 'list_all'),
    'assignment': ('list_own',),
}

CAPABILITIES = {}

for _resource, _actions in RESOURCE_ACTIONS.items():
    for _action in _actions:
        CAPABILITIES[('admin', _resource, _action)] = ALL

for _resource in ('event', 'station', 'team', 'slot', 'score', 'progress', 'results'):
    for _action in RESOURCE_ACTIONS[_resource]:
        CAPABILITIES[('manager', _resource, _action)] = MANAGED

CAPABILITIES.update({
    ('manager', 'judge', 'list'): ALL,
    ('manager', 'judge', 'create'): ALL,
    ('manager', 'judge', 'update'): ALL,
    ('manager', 'judge', 'delete'): ALL,
    ('manager', 'judge', 'import'): ALL,
    ('manager', 'authorized_email', 'list'): JUDGE_ROLE,
    ('manager', 'authorized_email', 'create'): JUDGE_ROLE,
    ('manager', 'authorized_email', 'delete'): JUDGE_ROLE,
    ('manager', 'notification', 'send'): ALL,
    ('manager', 'notification', 'list_all'): MANAGED,

    # Судья только читает свой срез и отправляет оценки за свои слоты
    ('judge', 'assignment', 'list_own'): ASSIGNED,
    ('judge', 'station', 'list'): ASSIGNED,
    ('judge', 'slot', 'read'): ASSIGNED,
    ('judge', 'score', 'submit'): ASSIGNED,
})


def scope_for(user, resource, action):
    if user is None:
        return None
    return CAPABILITIES.get((user.role, resource, action))


def check(user, resource, action):
    scope = scope_for(user, resource, action)
    if scope is None:
        logger.warning('Отказ в доступе: user=%s role=%s %s.%s',
                       getattr(user, 'id', None), getattr(user, 'role', None), resource, action)
        raise AuthorizationError(f'Роль "{getattr(user, "role", None)}" не может выполнить {resource}.{action}.')
    return scope


def is_assigned(judge_id, slot):
    return judge_id in (slot.judge_ids or []) or slot.captain_judge_id == judge_id


def judge_slots(judge_id, slots):
    return [slot for slot in slots if is_assigned(judge_id, slot)]


def judge_team_ids(judge_id, slots):
    team_ids = []
    for slot in judge_slots(judge_id, slots):
        if slot.team_id not in team_ids:
            team_ids.append(slot.team_id)
    return team_ids


def judge_scores(judge_id, slots, scores):
    """Оценки видны судье только по его собственным слотам."""
    slot_ids = {slot.id for slot in judge_slots(judge_id, slots)}
    return [score for score in scores if score.slot_id in slot_ids]


def judge_has_event(judge_id, event, slots):
    """Судья видит мероприятие, только если назначен хотя бы на один его слот. Прикрепление к мероприятию доступа не дает."""
    return any(slot.event_id == event.id and is_assigned(judge_id, slot) for slot in slots)


def visible_events(user, events, slots=()):
    scope = scope_for(user, 'event', 'list') or scope_for(user, 'assignment', 'list_own')
    if scope == ALL:
        return list(events)
    if scope == MANAGED:
        return [event for event in events if event.manager_id == user.id]
    if scope == ASSIGNED:
        return [event for event in events if judge_has_event(user.id, event, slots)]
    return []


def ensure_event_access(user, event, resource, action, slots=()):
    """
    Проверка действия над ресурсом внутри мероприятия.
    Чужое мероприятие менеджера выглядит как несуществующее.
    """
    scope = check(user, resource, action)
    if scope == ALL:
        return scope
    if scope == MANAGED:
        if event.manager_id != user.id:
            logger.warning('Менеджер %s обратился к чужому мероприятию %s', user.id, event.id)
            raise NotFoundError('Мероприятие не найдено.')
        return scope
    if scope == ASSIGNED:
        if not judge_has_event(user.id, event, slots):
            logger.warning('Судья %s не назначен на мероприятие %s', user.id, event.id)
            raise AuthorizationError('Вы не назначены на это мероприятие.')
        return scope
    raise AuthorizationError('Нет доступа.')


def ensure_slot_access(user, slot, event, action):
    scope = ensure_event_access(user, event, 'slot', action, slots=[slot])
    if scope == ASSIGNED and not is_assigned(user.id, slot):
        logger.warning('Судья %s запросил чужой слот %s', user.id, slot.id)
        raise AuthorizationError('Вы не назначены на этот слот.')
    return scope


def ensure_can_submit(user, slot, event):
    """Судья может оценить только слот, где он в списке судей. Проверяется по самому слоту."""
    scope = check(user, 'score', 'submit')
    if scope == ASSIGNED:
        if user.id not in (slot.judge_ids or []):
            logger.warning('Судья %s попытался оценить чужой слот %s', user.id, slot.id)
            raise AuthorizationError('Вы не назначены на этот слот.')
        return scope
    return ensure_event_access(user, event, 'score', 'submit')


def validate_role(role):
    if role not in ROLES:
        raise ValidationError('Роль должна быть admin, manager или judge.', field='role')
    return role


def ensure_can_assign_role(user, role):
    """Только администратор раздает любые роли; менеджер - только "judge"."""
    validate_role(role)
    scope = check(user, 'authorized_email', 'create')
    if scope == JUDGE_ROLE and role != 'judge':
        raise AuthorizationError('Менеджер может добавлять только судей.')
    return scope


def ensure_can_remove_email(user, entry):
    scope = check(user, 'authorized_email', 'delete')
    if scope == JUDGE_ROLE and entry.role != 'judge':
        raise AuthorizationError('Менеджер может удалять только судей.')
    return scope


def visible_authorized_emails(user, entries):
    scope = scope_for(user, 'authorized_email', 'list')
    if scope == ALL:
        return list(entries)
    if scope == JUDGE_ROLE:
        return [entry for entry in entries if entry.role == 'judge']
    return []


def visible_notifications(user, notifications, events):
    """Менеджер видит уведомления только судей своих мероприятий."""
    scope = check(user, 'notification', 'list_all')
    if scope == ALL:
        return list(notifications)
    judge_ids = set()
    for event in events:
        if event.manager_id == user.id:
            judge_ids.update(event.judge_ids or [])
    return [n for n in notifications if n.judge_id in judge_ids]
