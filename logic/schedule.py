# logic/schedule.py
# Создание и редактирование мероприятий, станций, команд и слотов расписания.
# Здесь проверяются инварианты: конец слота позже начала, капитан среди судей,
# команда и станция из того же мероприятия, что и слот.

import json
import logging
from datetime import datetime

from models import Event, Station, Team, ScheduleSlot
from .errors import ValidationError
from .rubric import parse_rubric

logger = logging.getLogger(__name__)


def parse_datetime(value, field):
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f'Неверный формат даты в поле "{field}".', field=field)
    else:
        raise ValidationError(f'Поле "{field}" обязательно.', field=field)
    # Время храним "наивным" в локальной зоне сервера, как и datetime.now()
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _required_text(payload, key):
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'Поле "{key}" обязательно.', field=key)
    return value.strip()


def _optional_text(payload, key):
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f'Поле "{key}" должно быть строкой.', field=key)
    return value.strip() or None


def _id_list(value, field):
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, int) and not isinstance(v, bool) for v in value):
        raise ValidationError(f'Поле "{field}" должно быть списком id.', field=field)
    # Порядок сохраняем, дубли убираем
    return list(dict.fromkeys(value))


def _ensure_judges(repo, judge_ids, field):
    found = {user.id: user for user in repo.list_users(judge_ids)}
    missing = [j for j in judge_ids if j not in found or found[j].role != 'judge']
    if missing:
        raise ValidationError(f'Не найдены судьи с id {missing}.', field=field)


# --- Мероприятия ---

def apply_event(repo, event, payload, user, creating=False):
    if creating or 'name' in payload:
        event.name = _required_text(payload, 'name')
    if creating or 'date' in payload:
        event.date = parse_datetime(payload.get('date'), 'date')
    for key, attr in (('location', 'location'), ('note', 'note')):
        if key in payload:
            setattr(event, attr, _optional_text(payload, key))
    if 'isActive' in payload:
        event.is_active = bool(payload['isActive'])
    if 'judgeIds' in payload:
        set_event_judges(repo, event, payload['judgeIds'])

    # Менеджер всегда владелец своих мероприятий; назначать другого может только админ
    if user.role == 'manager':
        if creating:
            event.manager_id = user.id
    elif 'managerId' in payload:
        manager_id = payload['managerId']
        if manager_id is not None:
            manager = repo.get_user(manager_id)
            if manager is None or manager.role != 'manager':
                raise ValidationError('Менеджер не найден.', field='managerId')
        event.manager_id = manager_id
    return event


def set_event_judges(repo, event, judge_ids):
    judge_ids = _id_list(judge_ids, 'judgeIds')
    _ensure_judges(repo, judge_ids, 'judgeIds')
    event.judge_ids = judge_ids
    return event


def duplicate_event(repo, event):
    """Копия мероприятия со станциями, командами и слотами. Оценки не копируются."""
    copy = Event(
        name=f'{event.name} (Copy)',
        date=datetime.now(),
        location=event.location,
        note=event.note,
        is_active=event.is_active,
        manager_id=event.manager_id,
        judge_ids=list(event.judge_ids or []),
    )
    repo.add(copy)

    station_map = {}
    for station in repo.list_stations(event.id):
        new_station = Station(name=station.name, rubric=dict(station.rubric), note=station.note)
        copy.stations.append(new_station)
        station_map[station.id] = new_station

    team_map = {}
    for team in repo.list_teams(event.id):
        new_team = Team(
            name=team.name, school_name=team.school_name, city=team.city,
            country=team.country, category=team.category, language=team.language,
        )
        copy.teams.append(new_team)
        team_map[team.id] = new_team

    for slot in repo.list_slots(event.id):
        new_team = team_map.get(slot.team_id)
        new_station = station_map.get(slot.station_id)
        if new_team is None or new_station is None:
            continue
        copy.slots.append(ScheduleSlot(
            team=new_team,
            station=new_station,
            start_time=slot.start_time,
            end_time=slot.end_time,
            judge_ids=list(slot.judge_ids or []),
            captain_judge_id=slot.captain_judge_id,
        ))

    logger.info('Мероприятие %s скопировано: %s станций, %s команд',
                event.id, len(station_map), len(team_map))
    return copy


# --- Станции ---

def apply_station(station, payload, creating=False):
    if creating or 'name' in payload:
        station.name = _required_text(payload, 'name')
    if creating or 'rubric' in payload:
        rubric = payload.get('rubric')
        if isinstance(rubric, str):
            try:
                rubric = json.loads(rubric)
            except ValueError:
                raise ValidationError('Рубрика должна быть JSON.', field='rubric')
        station.rubric = parse_rubric(rubric)
    if 'note' in payload:
        station.note = _optional_text(payload, 'note')
    return station


# --- Команды ---

def apply_team(team, payload, categories, creating=False):
    for key, attr in (('name', 'name'), ('schoolName', 'school_name'), ('language', 'language')):
        if creating or key in payload:
            setattr(team, attr, _required_text(payload, key))
    if creating or 'category' in payload:
        category = _required_text(payload, 'category')
        if category not in categories:
            raise ValidationError(f'Категория должна быть одной из: {", ".join(categories)}.', field='category')
        team.category = category
    for key in ('city', 'country'):
        if key in payload:
            setattr(team, key, _optional_text(payload, key))
    return team


def import_rows(rows, limit=None):
    if not isinstance(rows, list) or not rows:
        raise ValidationError('Нет данных для импорта.', field='data')
    if limit is not None and len(rows) > limit:
        raise ValidationError(f'Не больше {limit} строк за один импорт.', field='data')
    return rows


def import_teams(event, rows, categories):
    """Импорт команд целиком: одна ошибочная строка отменяет весь импорт."""
    created = []
    for number, row in enumerate(import_rows(rows), start=1):
        if not isinstance(row, dict):
            raise ValidationError(f'Строка {number}: ожидается объект.', field='data')
        team = Team()
        try:
            apply_team(team, row, categories, creating=True)
        except ValidationError as e:
            raise ValidationError(f'Строка {number}: {e.message}', field=e.field)
        event.teams.append(team)
        created.append(team)
    logger.info('Импортировано команд: %s (мероприятие %s)', len(created), event.id)
    return created


def import_stations(event, rows):
    created = []
    for number, row in enumerate(import_rows(rows), start=1):
        if not isinstance(row, dict):
            raise ValidationError(f'Строка {number}: ожидается объект.', field='data')
        station = Station()
        try:
            apply_station(station, row, creating=True)
        except ValidationError as e:
            raise ValidationError(f'Строка {number}: {e.message}', field=e.field)
        event.stations.append(station)
        created.append(station)
    logger.info('Импортировано станций: %s (мероприятие %s)', len(created), event.id)
    return created


# --- Слоты ---

def apply_slot(repo, slot, event, payload, creating=False):
    if creating or 'teamId' in payload:
        if payload.get('teamId') is None:
            raise ValidationError('Нужно выбрать команду.', field='teamId')
        team = repo.get_team(payload['teamId'])
        if team.event_id != event.id:
            raise ValidationError('Команда относится к другому мероприятию.', field='teamId')
        slot.team_id = team.id
    if creating or 'stationId' in payload:
        if payload.get('stationId') is None:
            raise ValidationError('Нужно выбрать станцию.', field='stationId')
        station = repo.get_station(payload['stationId'])
        if station.event_id != event.id:
            raise ValidationError('Станция относится к другому мероприятию.', field='stationId')
        slot.station_id = station.id
    if creating or 'startTime' in payload:
        slot.start_time = parse_datetime(payload.get('startTime'), 'startTime')
    if creating or 'endTime' in payload:
        slot.end_time = parse_datetime(payload.get('endTime'), 'endTime')
    if slot.end_time <= slot.start_time:
        raise ValidationError('Время окончания должно быть позже времени начала.', field='endTime')

    if creating or 'judgeIds' in payload:
        judge_ids = _id_list(payload.get('judgeIds'), 'judgeIds')
        _ensure_judges(repo, judge_ids, 'judgeIds')
        slot.judge_ids = judge_ids
    if creating or 'captainJudgeId' in payload:
        slot.captain_judge_id = payload.get('captainJudgeId')
    if slot.captain_judge_id is not None and slot.captain_judge_id not in (slot.judge_ids or []):
        raise ValidationError('Капитан должен быть среди назначенных судей.', field='captainJudgeId')
    if 'status' in payload:
        slot.status = _optional_text(payload, 'status')

    slot.event_id = event.id
    # Оценки хранят копию команды и станции слота, при переносе слота обновляем и их
    for score in slot.scores:
        score.team_id = slot.team_id
        score.station_id = slot.station_id
    return slot
