from datetime import datetime, timedelta

from models import Score, Team
from conftest import RUBRIC


# --- Авторизация ---

def test_login_and_me(client, factory):
    judge = factory.user('judge', name='Judge Dredd')

    response = client.post('/api/login', json={'username': judge.username, 'password': 'password'})
    assert response.status_code == 200
    assert response.get_json()['role'] == 'judge'

    assert client.get('/api/me').get_json()['name'] == 'Judge Dredd'
    client.post('/api/logout')
    assert client.get('/api/me').status_code == 401


def test_login_rejects_bad_password(client, factory):
    judge = factory.user('judge')
    response = client.post('/api/login', json={'username': judge.username, 'password': 'nope'})
    assert response.status_code == 401
    assert client.post('/api/login', json={}).status_code == 400


# --- Видимость мероприятий ---

def test_manager_sees_only_own_events(factory, login):
    manager = factory.user('manager')
    other = factory.user('manager')
    own = factory.event(manager, name='Own')
    foreign = factory.event(other, name='Foreign')

    client = login(manager)
    assert [e['name'] for e in client.get('/api/events').get_json()] == ['Own']
    assert client.get(f'/api/events/{own.id}').status_code == 200
    assert client.get(f'/api/events/{foreign.id}').status_code == 404
    assert client.delete(f'/api/events/{foreign.id}').status_code == 404


def test_manager_without_events_gets_empty_list(factory, login):
    factory.event(factory.user('manager'))
    client = login(factory.user('manager'))
    assert client.get('/api/events').get_json() == []


def test_judge_cannot_manage_events(factory, login):
    client = login(factory.user('judge'))
    assert client.get('/api/events').status_code == 403
    response = client.post('/api/events', json={'name': 'Mine', 'date': '2025-05-01T09:00:00'})
    assert response.status_code == 403


def test_manager_creates_event_as_owner(factory, login):
    manager = factory.user('manager')
    client = login(manager)

    response = client.post('/api/events', json={
        'name': 'Space Olympics 2025', 'date': '2025-05-01T09:00:00', 'location': 'Mars Base Alpha',
    })
    assert response.status_code == 201
    assert response.get_json()['managerId'] == manager.id


def test_duplicate_event(factory, login):
    manager = factory.user('manager')
    judge = factory.user('judge')
    event = factory.event(manager, judges=[judge], name='Space Olympics')
    station = factory.station(event)
    team = factory.team(event)
    slot = factory.slot(event, team, station, judges=[judge])
    factory.score(slot, judge, {'Speed': 5})

    client = login(manager)
    response = client.post(f'/api/events/{event.id}/duplicate')
    assert response.status_code == 201
    copy = response.get_json()
    assert copy['name'] == 'Space Olympics (Copy)'
    assert copy['judgeIds'] == [judge.id]

    assert [s['name'] for s in client.get(f'/api/events/{copy["id"]}/stations').get_json()] == ['Rover Navigation']
    slots = client.get(f'/api/events/{copy["id"]}/slots').get_json()
    assert len(slots) == 1
    assert slots[0]['id'] != slot.id
    assert client.get(f'/api/events/{copy["id"]}/scores').get_json() == []


# --- Станции, команды, слоты ---

def test_station_rubric_is_validated(factory, login):
    manager = factory.user('manager')
    event = factory.event(manager)
    client = login(manager)

    response = client.post(f'/api/events/{event.id}/stations', json={'name': 'Zero-G Repair', 'rubric': RUBRIC})
    assert response.status_code == 201

    bad = {'criteria': [{'name': 'Speed', 'maxPoints': 0}]}
    response = client.post(f'/api/events/{event.id}/stations', json={'name': 'Broken', 'rubric': bad})
    assert response.status_code == 400
    assert response.get_json()['field'] == 'rubric'


def test_team_import_is_all_or_nothing(factory, login):
    manager = factory.user('manager')
    event = factory.event(manager)
    client = login(manager)

    rows = [
        {'name': 'Apollo Juniors', 'schoolName': 'Mars Elementary', 'category': 'ElementarySchool', 'language': 'English'},
        {'name': 'Curiosity Rovers', 'schoolName': 'Gale Middle', 'category': 'University', 'language': 'English'},
    ]
    response = client.post(f'/api/events/{event.id}/import/teams', json={'data': rows})
    assert response.status_code == 400
    assert response.get_json()['message'].startswith('Строка 2')
    assert Team.query.count() == 0

    rows[1]['category'] = 'MiddleSchool'
    response = client.post(f'/api/events/{event.id}/import/teams', json={'data': rows})
    assert response.status_code == 201
    assert response.get_json()['imported'] == 2


def test_slot_creation_rules(factory, login):
    manager = factory.user('manager')
    judge = factory.user('judge')
    other_judge = factory.user('judge')
    event = factory.event(manager, judges=[judge])
    other_event = factory.event(manager, name='Other')
    station = factory.station(event)
    team = factory.team(event)
    foreign_team = factory.team(other_event, name='Foreign')
    client = login(manager)

    payload = {
        'teamId': team.id, 'stationId': station.id,
        'startTime': '2025-05-01T10:00:00', 'endTime': '2025-05-01T10:30:00',
        'judgeIds': [judge.id], 'captainJudgeId': judge.id,
    }
    response = client.post(f'/api/events/{event.id}/slots', json=payload)
    assert response.status_code == 201
    assert response.get_json()['captainJudgeId'] == judge.id

    response = client.post(f'/api/events/{event.id}/slots', json={**payload, 'teamId': foreign_team.id})
    assert response.status_code == 400
    assert response.get_json()['field'] == 'teamId'

    response = client.post(f'/api/events/{event.id}/slots', json={**payload, 'endTime': '2025-05-01T10:00:00'})
    assert response.status_code == 400
    assert response.get_json()['field'] == 'endTime'

    response = client.post(f'/api/events/{event.id}/slots', json={**payload, 'captainJudgeId': other_judge.id})
    assert response.status_code == 400
    assert response.get_json()['field'] == 'captainJudgeId'


# --- Оценки ---

def scoring_setup(factory):
    manager = factory.user('manager')
    judge = factory.user('judge')
    event = factory.event(manager, judges=[judge])
    station = factory.station(event)
    team = factory.team(event)
    slot = factory.slot(event, team, station, judges=[judge], captain=judge)
    return manager, judge, event, slot


def test_score_submission_replaces_previous(factory, login):
    _, judge, _, slot = scoring_setup(factory)
    client = login(judge)

    response = client.post('/api/scores', json={'slotId': slot.id, 'scores': {'Speed': 8, 'Accuracy': 7}})
    assert response.status_code == 201
    assert response.get_json()['teamId'] == slot.team_id

    response = client.post('/api/scores', json={'slotId': slot.id, 'scores': {'Speed': 9}, 'feedback': 'Fast'})
    assert response.status_code == 200
    assert response.get_json()['scores'] == {'Speed': 9}
    assert Score.query.count() == 1


def test_score_over_maximum_is_rejected(factory, login):
    _, judge, _, slot = scoring_setup(factory)
    client = login(judge)

    response = client.post('/api/scores', json={'slotId': slot.id, 'scores': {'Speed': 11, 'Innovation': 5}})
    assert response.status_code == 400
    assert response.get_json()['errors'] == {'Speed': 'exceeds maximum (10)'}
    assert Score.query.count() == 0


def test_unassigned_judge_cannot_score(factory, login):
    _, _, event, slot = scoring_setup(factory)
    stranger = factory.user('judge')

    response = login(stranger).post('/api/scores', json={'slotId': slot.id, 'scores': {'Speed': 5}})
    assert response.status_code == 403
    assert Score.query.count() == 0


def test_score_requires_slot_id(factory, login):
    _, judge, _, _ = scoring_setup(factory)
    response = login(judge).post('/api/scores', json={'scores': {'Speed': 5}})
    assert response.status_code == 400
    assert response.get_json()['field'] == 'slotId'


def test_judge_endpoints_show_only_own_slice(factory, login):
    manager, judge, event, slot = scoring_setup(factory)
    other_judge = factory.user('judge')
    other_team = factory.team(event, name='Curiosity Rovers')
    other_slot = factory.slot(event, other_team, slot.station, judges=[other_judge])
    factory.score(other_slot, other_judge, {'Speed': 3})
    client = login(judge)

    assert [e['id'] for e in client.get('/api/judge/events').get_json()] == [event.id]
    assert [t['id'] for t in client.get(f'/api/judge/events/{event.id}/teams').get_json()] == [slot.team_id]

    slots = client.get(f'/api/judge/events/{event.id}/slots').get_json()
    assert [s['id'] for s in slots] == [slot.id]
    assert slots[0]['status'] == 'ongoing'

    client.post('/api/scores', json={'slotId': slot.id, 'scores': {'Speed': 4}})
    slots = client.get(f'/api/judge/events/{event.id}/slots').get_json()
    assert slots[0]['status'] == 'complete'
    assert slots[0]['scoringStatus'] == 'complete'

    scores = client.get(f'/api/judge/events/{event.id}/scores').get_json()
    assert [s['slotId'] for s in scores] == [slot.id]


def test_judge_cannot_read_foreign_slot_status(factory, login):
    _, judge, event, slot = scoring_setup(factory)
    stranger = factory.user('judge')

    assert login(judge).get(f'/api/slots/{slot.id}/status').get_json()['status'] == 'ongoing'
    assert login(stranger).get(f'/api/slots/{slot.id}/status').status_code == 403


def test_delete_judge_with_scores_is_rejected(factory, login):
    manager, judge, _, slot = scoring_setup(factory)
    factory.score(slot, judge, {'Speed': 1})
    assert login(manager).delete(f'/api/judges/{judge.id}').status_code == 400


# --- Прогресс и результаты ---

def test_progress_and_matrix(factory, login):
    manager, judge, event, slot = scoring_setup(factory)
    factory.station(event, name='Zero-G Repair')
    factory.score(slot, judge, {'Speed': 6})
    client = login(manager)

    data = client.get(f'/api/events/{event.id}/progress').get_json()
    assert data['summary']['total'] == 1
    assert data['summary']['complete'] == 1
    assert data['summary']['progress_percent'] == 100.0
    assert data['slots'][0]['judgesScored'] == [judge.id]
    assert data['pollInterval'] == 10

    matrix = client.get(f'/api/events/{event.id}/matrix?view=team').get_json()
    assert [c['status'] for c in matrix['rows'][0]['cells']] == ['complete', 'no_slot']

    judges = client.get(f'/api/events/{event.id}/matrix?view=judge').get_json()['judges']
    assert [j['id'] for j in judges] == [judge.id]
    assert [c['name'] for c in judges[0]['columns']] == ['Rover Navigation']

    assert client.get(f'/api/events/{event.id}/matrix?view=school').status_code == 400


def test_results_and_export(factory, login):
    manager = factory.user('manager')
    judge = factory.user('judge')
    event = factory.event(manager, judges=[judge])
    navigation = factory.station(event)
    repair = factory.station(event, name='Zero-G Repair')
    apollo = factory.team(event, name='Apollo Juniors')
    curiosity = factory.team(event, name='Curiosity Rovers', category='MiddleSchool')
    start = datetime.now() - timedelta(hours=2)
    factory.score(factory.slot(event, apollo, navigation, judges=[judge], start=start), judge, {'Speed': 4})
    factory.score(factory.slot(event, curiosity, navigation, judges=[judge], start=start), judge, {'Speed': 9})
    client = login(manager)

    data = client.get(f'/api/events/{event.id}/results').get_json()
    assert [(r['rank'], r['teamName'], r['totalScore']) for r in data['rankings']] == [
        (1, 'Curiosity Rovers', 9), (2, 'Apollo Juniors', 4),
    ]
    winners = {w['stationName']: w for w in data['stationWinners']}
    assert winners['Rover Navigation']['winnerTeam']['name'] == 'Curiosity Rovers'
    assert winners[repair.name]['winnerTeam'] is None
    assert winners[repair.name]['bestScore'] is None

    data = client.get(f'/api/events/{event.id}/results?category=ElementarySchool').get_json()
    assert [r['teamName'] for r in data['rankings']] == ['Apollo Juniors']
    assert client.get(f'/api/events/{event.id}/results?category=University').status_code == 400

    board = client.get(f'/api/events/{event.id}/leaderboard').get_json()['categories']
    assert board['MiddleSchool'][0]['rank'] == 1

    response = client.get(f'/api/events/{event.id}/export/results')
    assert response.mimetype == 'text/csv'
    lines = response.data.decode().splitlines()
    assert lines[0] == 'rank,teamName,schoolName,category,language,totalScore'
    assert lines[1] == '1,Curiosity Rovers,Curiosity Rovers School,MiddleSchool,English,9'


# --- Разрешенные email и уведомления ---

def test_manager_adds_only_judge_emails(factory, login):
    admin = factory.user('admin')
    manager = factory.user('manager')

    client = login(manager)
    response = client.post('/api/authorized-emails', json={'email': 'Boss@Example.com', 'role': 'manager'})
    assert response.status_code == 403
    response = client.post('/api/authorized-emails', json={'email': 'Judge@Example.com', 'role': 'judge'})
    assert response.status_code == 201
    assert response.get_json()['email'] == 'judge@example.com'
    assert client.post('/api/authorized-emails', json={'email': 'judge@example.com', 'role': 'judge'}).status_code == 400

    client = login(admin)
    assert client.post('/api/authorized-emails', json={'email': 'boss@example.com', 'role': 'manager'}).status_code == 201
    assert len(client.get('/api/authorized-emails').get_json()) == 2

    client = login(manager)
    assert [e['role'] for e in client.get('/api/authorized-emails').get_json()] == ['judge']


def test_notifications(factory, login):
    manager = factory.user('manager')
    judge = factory.user('judge')
    other_judge = factory.user('judge')
    factory.event(manager, judges=[judge])

    response = login(manager).post('/api/notifications/send', json={'judgeId': judge.id, 'message': 'Go to station 2'})
    assert response.status_code == 200
    assert response.get_json()['method'] == 'in-app'
    note_id = response.get_json()['notification']['id']
    assert len(login(manager).get('/api/notifications/all').get_json()) == 1

    assert login(other_judge).patch(f'/api/notifications/{note_id}/read').status_code == 404

    client = login(judge)
    assert [n['message'] for n in client.get('/api/notifications').get_json()] == ['Go to station 2']
    assert client.patch(f'/api/notifications/{note_id}/read').get_json()['isRead'] is True


def test_judge_import_reports_bad_rows(factory, login):
    client = login(factory.user('manager'))
    rows = [
        {'name': 'Judge Dredd', 'username': 'dredd', 'languages': 'English;Russian'},
        {'name': 'No Login'},
    ]
    data = client.post('/api/import/judges', json={'data': rows}).get_json()
    assert data['imported'] == 1
    assert data['errors'] == 1
    assert data['judges'][0]['languages'] == ['English', 'Russian']
    assert data['errorDetails'][0]['error'] == 'Missing required fields: name and username'


def test_moving_slot_moves_its_scores(factory, login):
    manager, judge, event, slot = scoring_setup(factory)
    zenith = factory.team(event, name='Zenith')
    repair = factory.station(event, name='Zero-G Repair')
    factory.score(slot, judge, {'Speed': 9})
    client = login(manager)

    response = client.put(f'/api/slots/{slot.id}', json={'teamId': zenith.id, 'stationId': repair.id})
    assert response.status_code == 200

    scores = client.get(f'/api/events/{event.id}/scores').get_json()
    assert [(s['slotId'], s['teamId'], s['stationId']) for s in scores] == [(slot.id, zenith.id, repair.id)]

    results = client.get(f'/api/events/{event.id}/results').get_json()
    assert results['rankings'][0]['teamName'] == 'Zenith'
    assert results['rankings'][0]['totalScore'] == 9
    winners = {w['stationName']: w['winnerTeam'] for w in results['stationWinners']}
    assert winners['Zero-G Repair']['name'] == 'Zenith'
    assert winners['Rover Navigation'] is None


def test_attached_judge_without_slots_sees_nothing(factory, login):
    manager = factory.user('manager')
    judge = factory.user('judge')
    event = factory.event(manager, judges=[judge])
    factory.station(event)
    client = login(judge)

    assert client.get('/api/judge/events').get_json() == []
    assert client.get(f'/api/events/{event.id}/stations').status_code == 403


def test_own_slots_are_stable_between_reads(factory, login):
    _, judge, event, slot = scoring_setup(factory)
    other_judge = factory.user('judge')
    second = factory.slot(event, factory.team(event, name='Gemini'), slot.station, judges=[judge, other_judge])
    factory.slot(event, factory.team(event, name='Voyager'), slot.station, judges=[other_judge])
    client = login(judge)

    first_read = client.get(f'/api/judge/events/{event.id}/slots').get_json()
    second_read = client.get(f'/api/judge/events/{event.id}/slots').get_json()

    assert first_read == second_read
    assert {s['id'] for s in first_read} == {slot.id, second.id}
