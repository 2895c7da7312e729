# routes/main.py
# Прогресс судейства, результаты и уведомления

import csv
import io

from flask import Blueprint, jsonify, request, current_app, Response
from repository import get_repository
from logic import access
from logic.errors import NotFoundError, ValidationError
from logic.progress import VIEWS, scoring_matrix, slot_details
from logic.ranking import RESULT_COLUMNS, entry_to_dict, leaderboard, rank_teams, results_rows, station_winners
from logic.slot_status import current_time, index_scores, progress_summary, slot_scoring_status, slot_status
from routes.auth import login_required, current_user
from routes.helpers import load_event

main_bp = Blueprint('main', __name__, url_prefix='/api')


def _category_filter(categories):
    category = request.args.get('category') or None
    if category in (None, 'all'):
        return None
    if category not in categories:
        raise ValidationError(f'Неизвестная категория "{category}".', field='category')
    return category


@main_bp.route('/events/<int:event_id>/scores', methods=['GET'])
@login_required
def list_scores(event_id):
    # Судьи используют /api/judge/events/<id>/scores
    event = load_event(event_id, 'score', 'list')
    return jsonify([s.to_dict() for s in get_repository().list_scores(event.id)])


# --- Прогресс ---

@main_bp.route('/events/<int:event_id>/matrix', methods=['GET'])
@login_required
def matrix(event_id):
    view = request.args.get('view', 'team')
    if view not in VIEWS:
        raise ValidationError(f'Неизвестное представление "{view}".', field='view')

    repo = get_repository()
    event = load_event(event_id, 'progress', 'read')
    slots = repo.list_slots(event.id)
    judges = []
    if view == 'judge':
        judges = repo.list_users({j for slot in slots for j in (slot.judge_ids or [])})

    data = scoring_matrix(
        view,
        repo.list_teams(event.id),
        repo.list_stations(event.id),
        slots,
        repo.list_scores(event.id),
        judges=judges,
    )
    data['pollInterval'] = current_app.config['POLL_INTERVAL_SECONDS']
    return jsonify(data)


@main_bp.route('/events/<int:event_id>/progress', methods=['GET'])
@login_required
def progress(event_id):
    repo = get_repository()
    event = load_event(event_id, 'progress', 'read')
    slots = repo.list_slots(event.id)
    scores = repo.list_scores(event.id)
    now = current_time()
    return jsonify({
        'summary': progress_summary(slots, scores, now),
        'slots': slot_details(slots, scores, now),
        'pollInterval': current_app.config['POLL_INTERVAL_SECONDS'],
    })


@main_bp.route('/slots/<int:slot_id>/status', methods=['GET'])
@login_required
def slot_status_route(slot_id):
    repo = get_repository()
    user = current_user()
    slot = repo.get_slot(slot_id)
    access.ensure_slot_access(user, slot, repo.get_event(slot.event_id), 'read')

    judge_id = request.args.get('judgeId', type=int)
    if user.role == 'judge':
        # Судья видит только свой статус
        judge_id = user.id

    scored = index_scores(slot.scores).get(slot.id)
    return jsonify({
        'slotId': slot.id,
        'judgeId': judge_id,
        'status': slot_status(slot, scored, current_time(), judge_id=judge_id),
        'scoringStatus': slot_scoring_status(slot, scored),
    })


# --- Результаты ---

@main_bp.route('/events/<int:event_id>/leaderboard', methods=['GET'])
@login_required
def leaderboard_route(event_id):
    repo = get_repository()
    event = load_event(event_id, 'results', 'read')
    board = leaderboard(repo.list_teams(event.id), repo.list_scores(event.id))
    return jsonify({
        'categories': {
            category: [entry_to_dict(entry) for entry in entries]
            for category, entries in board.items()
        },
        'pollInterval': current_app.config['POLL_INTERVAL_SECONDS'],
    })


@main_bp.route('/events/<int:event_id>/results', methods=['GET'])
@login_required
def results(event_id):
    repo = get_repository()
    event = load_event(event_id, 'results', 'read')
    category = _category_filter(current_app.config['TEAM_CATEGORIES'])
    teams = repo.list_teams(event.id)
    scores = repo.list_scores(event.id)

    winners = []
    for item in station_winners(repo.list_stations(event.id), teams, scores):
        winners.append({
            'stationId': item['station'].id,
            'stationName': item['station'].name,
            'winnerTeam': item['winner'].to_dict() if item['winner'] else None,
            'bestScore': item['bestScore'],
        })

    return jsonify({
        'category': category,
        'rankings': [entry_to_dict(entry) for entry in rank_teams(teams, scores, category)],
        'stationWinners': winners,
    })


@main_bp.route('/events/<int:event_id>/export/results', methods=['GET'])
@login_required
def export_results(event_id):
    repo = get_repository()
    event = load_event(event_id, 'results', 'export')
    category = _category_filter(current_app.config['TEAM_CATEGORIES'])

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(RESULT_COLUMNS)
    writer.writerows(results_rows(repo.list_teams(event.id), repo.list_scores(event.id), category))

    return Response(
        buffer.getvalue(),
        mimetype='text/csv',
        headers={'Content-Disposition': 'attachment; filename=results.csv'},
    )


# --- Уведомления текущего пользователя ---

@main_bp.route('/notifications', methods=['GET'])
@login_required
def my_notifications():
    notifications = get_repository().list_notifications(judge_id=current_user().id)
    return jsonify([n.to_dict() for n in notifications])


@main_bp.route('/notifications/<int:notification_id>/read', methods=['PATCH'])
@login_required
def mark_notification_read(notification_id):
    repo = get_repository()
    notification = repo.get_notification(notification_id)
    # Чужое уведомление выглядит как несуществующее
    if notification.judge_id != current_user().id:
        raise NotFoundError('Уведомление не найдено.')
    notification.is_read = True
    repo.commit()
    return jsonify(notification.to_dict())
