# logic/progress.py
# Матрица прогресса судейства: команды x станции.
# Три представления - одна и та же выборка с переставленным ключом.
# Слоты индексируются по (team_id, station_id), оценки - по slot_id, до построения любой ячейки.

from .errors import ValidationError
from .slot_status import NO_SLOT, current_time, index_scores, slot_scoring_status, slot_status

VIEWS = ('team', 'station', 'judge')


def _ordered(slots):
    return sorted(slots, key=lambda s: (s.start_time, s.id))


def index_slots(slots):
    """{(team_id, station_id): slot}. При дублях берется самый ранний слот."""
    index = {}
    for slot in _ordered(slots):
        index.setdefault((slot.team_id, slot.station_id), slot)
    return index


def index_judge_slots(slots):
    """{(judge_id, team_id, station_id): slot} и {judge_id: {station_id, ...}}."""
    index = {}
    stations_by_judge = {}
    for slot in _ordered(slots):
        for judge_id in slot.judge_ids or []:
            index.setdefault((judge_id, slot.team_id, slot.station_id), slot)
            stations_by_judge.setdefault(judge_id, set()).add(slot.station_id)
    return index, stations_by_judge


def _cell(slot, scored, now, judge_id=None):
    if slot is None:
        return {'slotId': None, 'status': NO_SLOT}
    return {
        'slotId': slot.id,
        'status': slot_status(slot, scored.get(slot.id), now, judge_id=judge_id),
    }


def _label(entity):
    return {'id': entity.id, 'name': entity.name}


def team_view(teams, stations, slots, scores, now=None):
    now = now or current_time()
    by_pair = index_slots(slots)
    scored = index_scores(scores)

    rows = []
    for team in teams:
        cells = []
        for station in stations:
            cell = _cell(by_pair.get((team.id, station.id)), scored, now)
            cell['stationId'] = station.id
            cells.append(cell)
        rows.append({**_label(team), 'cells': cells})

    return {'view': 'team', 'columns': [_label(s) for s in stations], 'rows': rows}


def station_view(teams, stations, slots, scores, now=None):
    now = now or current_time()
    by_pair = index_slots(slots)
    scored = index_scores(scores)

    rows = []
    for station in stations:
        cells = []
        for team in teams:
            cell = _cell(by_pair.get((team.id, station.id)), scored, now)
            cell['teamId'] = team.id
            cells.append(cell)
        rows.append({**_label(station), 'cells': cells})

    return {'view': 'station', 'columns': [_label(t) for t in teams], 'rows': rows}


def judge_view(teams, stations, slots, scores, judges, now=None):
    """
    Для каждого судьи, у которого есть хотя бы один слот: строки - команды,
    столбцы - только его станции. Ячейка оценена, если оценил именно этот судья.
    """
    now = now or current_time()
    by_judge, stations_by_judge = index_judge_slots(slots)
    scored = index_scores(scores)

    sections = []
    for judge in judges:
        judge_station_ids = stations_by_judge.get(judge.id)
        if not judge_station_ids:
            continue
        judge_stations = [s for s in stations if s.id in judge_station_ids]

        rows = []
        for team in teams:
            cells = []
            for station in judge_stations:
                slot = by_judge.get((judge.id, team.id, station.id))
                cell = _cell(slot, scored, now, judge_id=judge.id)
                cell['stationId'] = station.id
                cells.append(cell)
            rows.append({**_label(team), 'cells': cells})

        sections.append({
            **_label(judge),
            'assignments': sum(1 for s in slots if judge.id in (s.judge_ids or [])),
            'columns': [_label(s) for s in judge_stations],
            'rows': rows,
        })

    return {'view': 'judge', 'judges': sections}


def scoring_matrix(view, teams, stations, slots, scores, judges=(), now=None):
    if view == 'team':
        return team_view(teams, stations, slots, scores, now)
    if view == 'station':
        return station_view(teams, stations, slots, scores, now)
    if view == 'judge':
        return judge_view(teams, stations, slots, scores, judges, now)
    raise ValidationError(f'Неизвестное представление "{view}".', field='view')


def slot_details(slots, scores, now=None):
    """Кто из назначенных судей уже оценил слот, а кто еще нет. Отсортировано по времени начала."""
    now = now or current_time()
    scored = index_scores(scores)

    details = []
    for slot in _ordered(slots):
        assigned = list(slot.judge_ids or [])
        done = scored.get(slot.id, set())
        details.append({
            'slotId': slot.id,
            'teamId': slot.team_id,
            'stationId': slot.station_id,
            'startTime': slot.start_time.isoformat(),
            'endTime': slot.end_time.isoformat(),
            'judgesScored': [j for j in assigned if j in done],
            'judgesNotScored': [j for j in assigned if j not in done],
            'scoringStatus': slot_scoring_status(slot, done),
            'status': slot_status(slot, done, now),
        })
    return details
