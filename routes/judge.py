# routes/judge.py
# Маршруты судьи: только свои назначения и отправка оценок

from flask import Blueprint, jsonify
from repository import get_repository
from logic import access
from logic.errors import ValidationError
from logic.scoring import submit_score
from logic.slot_status import current_time, index_scores, slot_status, slot_scoring_status
from routes.auth import login_required, current_user
from routes.helpers import json_body

judge_bp = Blueprint('judge', __name__, url_prefix='/api')


def own_slots(event_id):
    """Слоты мероприятия, где текущий пользователь среди судей. Пустой список - не ошибка."""
    access.check(current_user(), 'assignment', 'list_own')
    repo = get_repository()
    event = repo.get_event(event_id)
    return event, access.judge_slots(current_user().id, repo.list_slots(event.id))


@judge_bp.route('/judge/events', methods=['GET'])
@login_required
def my_events():
    access.check(current_user(), 'assignment', 'list_own')
    repo = get_repository()
    events = access.visible_events(current_user(), repo.list_events(), repo.list_slots())
    return jsonify([e.to_dict() for e in events])


@judge_bp.route('/judge/events/<int:event_id>/teams', methods=['GET'])
@login_required
def my_teams(event_id):
    event, slots = own_slots(event_id)
    team_ids = set(access.judge_team_ids(current_user().id, slots))
    teams = [t for t in get_repository().list_teams(event.id) if t.id in team_ids]
    return jsonify([t.to_dict() for t in teams])


@judge_bp.route('/judge/events/<int:event_id>/slots', methods=['GET'])
@login_required
def my_slots(event_id):
    event, slots = own_slots(event_id)
    scored = index_scores(get_repository().list_scores(event.id))
    now = current_time()
    result = []
    for slot in slots:
        data = slot.to_dict()
        # Статус именно для этого судьи: оценил ли он сам
        data['status'] = slot_status(slot, scored.get(slot.id), now, judge_id=current_user().id)
        data['scoringStatus'] = slot_scoring_status(slot, scored.get(slot.id))
        result.append(data)
    return jsonify(result)


@judge_bp.route('/judge/events/<int:event_id>/scores', methods=['GET'])
@login_required
def my_scores(event_id):
    event, slots = own_slots(event_id)
    scores = access.judge_scores(current_user().id, slots, get_repository().list_scores(event.id))
    return jsonify([s.to_dict() for s in scores])


@judge_bp.route('/scores', methods=['POST'])
@login_required
def create_score():
    data = json_body()
    if not isinstance(data.get('slotId'), int) or isinstance(data.get('slotId'), bool):
        raise ValidationError('Не указан слот.', field='slotId')

    score, created = submit_score(
        get_repository(), current_user(), data['slotId'], data.get('scores'), data.get('feedback'),
    )
    return jsonify(score.to_dict()), 201 if created else 200
