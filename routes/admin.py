# routes/admin.py
# Управление мероприятиями, станциями, командами, расписанием и судьями (админ и менеджер)

import logging

from flask import Blueprint, jsonify, current_app
from models import Event, Station, Team, ScheduleSlot, User
from repository import get_repository
from logic import access
from logic.errors import ValidationError
from logic.schedule import (
    apply_event, set_event_judges, duplicate_event,
    apply_station, apply_team, apply_slot, import_teams, import_stations,
)
from logic.accounts import apply_judge, require_judge, import_judges, add_authorized_email, send_notification
from routes.auth import login_required, current_user
from routes.helpers import json_body, load_event

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/api')


# --- Мероприятия ---

@admin_bp.route('/events', methods=['GET'])
@login_required
def list_events():
    access.check(current_user(), 'event', 'list')
    events = access.visible_events(current_user(), get_repository().list_events())
    return jsonify([e.to_dict() for e in events])


@admin_bp.route('/events', methods=['POST'])
@login_required
def create_event():
    access.check(current_user(), 'event', 'create')
    repo = get_repository()
    event = apply_event(repo, Event(judge_ids=[]), json_body(), current_user(), creating=True)
    repo.add(event)
    repo.commit()
    logger.info('Создано мероприятие %s пользователем %s', event.id, current_user().id)
    return jsonify(event.to_dict()), 201


@admin_bp.route('/events/<int:event_id>', methods=['GET'])
@login_required
def get_event(event_id):
    return jsonify(load_event(event_id, 'event', 'read').to_dict())


@admin_bp.route('/events/<int:event_id>', methods=['PUT'])
@login_required
def update_event(event_id):
    repo = get_repository()
    event = apply_event(repo, load_event(event_id, 'event', 'update'), json_body(), current_user())
    repo.commit()
    return jsonify(event.to_dict())


@admin_bp.route('/events/<int:event_id>', methods=['DELETE'])
@login_required
def delete_event(event_id):
    repo = get_repository()
    event = load_event(event_id, 'event', 'delete')
    # Благодаря 'cascade' в моделях станции, команды, слоты и оценки удалятся вместе с мероприятием
    repo.delete(event)
    repo.commit()
    logger.info('Мероприятие %s удалено', event_id)
    return '', 204


@admin_bp.route('/events/<int:event_id>/duplicate', methods=['POST'])
@login_required
def duplicate_event_route(event_id):
    repo = get_repository()
    copy = duplicate_event(repo, load_event(event_id, 'event', 'duplicate'))
    repo.commit()
    return jsonify(copy.to_dict()), 201


@admin_bp.route('/events/<int:event_id>/judges', methods=['PUT'])
@login_required
def update_event_judges(event_id):
    repo = get_repository()
    event = load_event(event_id, 'event', 'assign_judges')
    set_event_judges(repo, event, json_body().get('judgeIds') or [])
    repo.commit()
    return jsonify(event.to_dict())


# --- Станции ---

@admin_bp.route('/events/<int:event_id>/stations', methods=['GET'])
@login_required
def list_stations(event_id):
    # Судья тоже видит станции мероприятий, на которые назначен
    event = load_event(event_id, 'station', 'list')
    return jsonify([s.to_dict() for s in get_repository().list_stations(event.id)])


@admin_bp.route('/events/<int:event_id>/stations', methods=['POST'])
@login_required
def create_station(event_id):
    repo = get_repository()
    event = load_event(event_id, 'station', 'create')
    station = apply_station(Station(), json_body(), creating=True)
    event.stations.append(station)
    repo.commit()
    return jsonify(station.to_dict()), 201


@admin_bp.route('/stations/<int:station_id>', methods=['PUT'])
@login_required
def update_station(station_id):
    repo = get_repository()
    station = repo.get_station(station_id)
    load_event(station.event_id, 'station', 'update')
    apply_station(station, json_body())
    repo.commit()
    return jsonify(station.to_dict())


@admin_bp.route('/stations/<int:station_id>', methods=['DELETE'])
@login_required
def delete_station(station_id):
    repo = get_repository()
    station = repo.get_station(station_id)
    load_event(station.event_id, 'station', 'delete')
    repo.delete(station)
    repo.commit()
    return '', 204


@admin_bp.route('/events/<int:event_id>/import/stations', methods=['POST'])
@login_required
def import_stations_route(event_id):
    repo = get_repository()
    event = load_event(event_id, 'station', 'import')
    created = import_stations(event, json_body().get('data'))
    repo.commit()
    return jsonify({'imported': len(created), 'stations': [s.to_dict() for s in created]}), 201


# --- Команды ---

@admin_bp.route('/events/<int:event_id>/teams', methods=['GET'])
@login_required
def list_teams(event_id):
    event = load_event(event_id, 'team', 'list')
    return jsonify([t.to_dict() for t in get_repository().list_teams(event.id)])


@admin_bp.route('/events/<int:event_id>/teams', methods=['POST'])
@login_required
def create_team(event_id):
    repo = get_repository()
    event = load_event(event_id, 'team', 'create')
    team = apply_team(Team(), json_body(), current_app.config['TEAM_CATEGORIES'], creating=True)
    event.teams.append(team)
    repo.commit()
    return jsonify(team.to_dict()), 201


@admin_bp.route('/teams/<int:team_id>', methods=['PUT'])
@login_required
def update_team(team_id):
    repo = get_repository()
    team = repo.get_team(team_id)
    load_event(team.event_id, 'team', 'update')
    apply_team(team, json_body(), current_app.config['TEAM_CATEGORIES'])
    repo.commit()
    return jsonify(team.to_dict())


@admin_bp.route('/teams/<int:team_id>', methods=['DELETE'])
@login_required
def delete_team(team_id):
    repo = get_repository()
    team = repo.get_team(team_id)
    load_event(team.event_id, 'team', 'delete')
    repo.delete(team)
    repo.commit()
    return '', 204


@admin_bp.route('/events/<int:event_id>/import/teams', methods=['POST'])
@login_required
def import_teams_route(event_id):
    repo = get_repository()
    event = load_event(event_id, 'team', 'import')
    created = import_teams(event, json_body().get('data'), current_app.config['TEAM_CATEGORIES'])
    repo.commit()
    return jsonify({'imported': len(created), 'teams': [t.to_dict() for t in created]}), 201


# --- Расписание ---

@admin_bp.route('/events/<int:event_id>/slots', methods=['GET'])
@login_required
def list_slots(event_id):
    event = load_event(event_id, 'slot', 'list')
    return jsonify([s.to_dict() for s in get_repository().list_slots(event.id)])


@admin_bp.route('/events/<int:event_id>/slots', methods=['POST'])
@login_required
def create_slot(event_id):
    repo = get_repository()
    event = load_event(event_id, 'slot', 'create')
    slot = apply_slot(repo, ScheduleSlot(), event, json_body(), creating=True)
    repo.add(slot)
    repo.commit()
    return jsonify(slot.to_dict()), 201


@admin_bp.route('/slots/<int:slot_id>', methods=['PUT'])
@login_required
def update_slot(slot_id):
    repo = get_repository()
    slot = repo.get_slot(slot_id)
    event = load_event(slot.event_id, 'slot', 'update')
    apply_slot(repo, slot, event, json_body())
    repo.commit()
    return jsonify(slot.to_dict())


@admin_bp.route('/slots/<int:slot_id>', methods=['DELETE'])
@login_required
def delete_slot(slot_id):
    repo = get_repository()
    slot = repo.get_slot(slot_id)
    load_event(slot.event_id, 'slot', 'delete')
    repo.delete(slot)
    repo.commit()
    return '', 204


# --- Судьи ---

@admin_bp.route('/judges', methods=['GET'])
@login_required
def list_judges():
    access.check(current_user(), 'judge', 'list')
    return jsonify([j.to_dict() for j in get_repository().list_judges()])


@admin_bp.route('/judges-with-events', methods=['GET'])
@login_required
def list_judges_with_events():
    access.check(current_user(), 'judge', 'list')
    repo = get_repository()
    events = access.visible_events(current_user(), repo.list_events())
    result = []
    for judge in repo.list_judges():
        data = judge.to_dict()
        data['assignedEvents'] = [e.to_dict() for e in events if judge.id in (e.judge_ids or [])]
        result.append(data)
    return jsonify(result)


@admin_bp.route('/judges', methods=['POST'])
@login_required
def create_judge():
    access.check(current_user(), 'judge', 'create')
    repo = get_repository()
    judge = apply_judge(repo, User(), json_body(), creating=True)
    repo.add(judge)
    repo.commit()
    return jsonify(judge.to_dict()), 201


@admin_bp.route('/judges/<int:judge_id>', methods=['PUT'])
@login_required
def update_judge(judge_id):
    access.check(current_user(), 'judge', 'update')
    repo = get_repository()
    judge = apply_judge(repo, require_judge(repo, judge_id), json_body())
    repo.commit()
    return jsonify(judge.to_dict())


@admin_bp.route('/judges/<int:judge_id>', methods=['DELETE'])
@login_required
def delete_judge(judge_id):
    access.check(current_user(), 'judge', 'delete')
    repo = get_repository()
    judge = require_judge(repo, judge_id)
    if repo.judge_has_scores(judge.id):
        raise ValidationError('Невозможно удалить судью, так как он уже выставил оценки.')

    # Убираем судью из назначений, чтобы капитан всегда оставался среди судей слота
    for event in repo.list_events():
        if judge.id in (event.judge_ids or []):
            event.judge_ids = [j for j in event.judge_ids if j != judge.id]
    for slot in repo.list_slots():
        if judge.id in (slot.judge_ids or []) or slot.captain_judge_id == judge.id:
            slot.judge_ids = [j for j in (slot.judge_ids or []) if j != judge.id]
            if slot.captain_judge_id == judge.id:
                slot.captain_judge_id = None
    repo.delete(judge)
    repo.commit()
    return '', 204


@admin_bp.route('/import/judges', methods=['POST'])
@login_required
def import_judges_route():
    access.check(current_user(), 'judge', 'import')
    repo = get_repository()
    created, errors = import_judges(repo, json_body().get('data'), current_app.config['MAX_JUDGE_IMPORT'])
    repo.commit()
    return jsonify({
        'imported': len(created),
        'errors': len(errors),
        'judges': [j.to_dict() for j in created],
        'errorDetails': errors,
    }), 201


# --- Разрешенные email ---

@admin_bp.route('/authorized-emails', methods=['GET'])
@login_required
def list_authorized_emails():
    access.check(current_user(), 'authorized_email', 'list')
    entries = access.visible_authorized_emails(current_user(), get_repository().list_authorized_emails())
    return jsonify([e.to_dict() for e in entries])


@admin_bp.route('/authorized-emails', methods=['POST'])
@login_required
def create_authorized_email():
    repo = get_repository()
    entry = add_authorized_email(repo, current_user(), json_body())
    repo.commit()
    return jsonify(entry.to_dict()), 201


@admin_bp.route('/authorized-emails/<int:entry_id>', methods=['DELETE'])
@login_required
def delete_authorized_email(entry_id):
    access.check(current_user(), 'authorized_email', 'delete')
    repo = get_repository()
    entry = repo.get_authorized_email(entry_id)
    access.ensure_can_remove_email(current_user(), entry)
    repo.delete(entry)
    repo.commit()
    return '', 204


# --- Уведомления ---

@admin_bp.route('/notifications/send', methods=['POST'])
@login_required
def send_notification_route():
    access.check(current_user(), 'notification', 'send')
    data = json_body()
    notification = send_notification(
        get_repository(), data.get('judgeId'), data.get('message'),
        sms_enabled=current_app.config['SMS_ENABLED'],
    )
    return jsonify({'success': True, 'method': 'in-app', 'notification': notification.to_dict()})


@admin_bp.route('/notifications/all', methods=['GET'])
@login_required
def list_all_notifications():
    repo = get_repository()
    notifications = access.visible_notifications(current_user(), repo.list_notifications(), repo.list_events())
    return jsonify([n.to_dict() for n in notifications])
