from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from app import create_app
from config import TestConfig
from extensions import db
from models import User, Event, Station, Team, ScheduleSlot, Score

RUBRIC = {'criteria': [
    {'name': 'Speed', 'maxPoints': 10},
    {'name': 'Accuracy', 'maxPoints': 10},
    {'name': 'Innovation', 'maxPoints': 5},
]}


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


class Factory:
    """Создает сущности прямо в базе для HTTP-тестов."""

    def __init__(self, session):
        self.session = session
        self.counter = 0

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def user(self, role='judge', name=None, password='password'):
        self.counter += 1
        user = User(username=f'{role}{self.counter}', role=role,
                    name=name or f'{role.title()} {self.counter}', languages=['English'])
        user.set_password(password)
        return self._save(user)

    def event(self, manager=None, judges=(), name='Space Olympics'):
        return self._save(Event(
            name=name, date=datetime(2025, 5, 1), location='Mars Base Alpha',
            manager_id=manager.id if manager else None,
            judge_ids=[j.id for j in judges],
        ))

    def station(self, event, name='Rover Navigation', rubric=None):
        return self._save(Station(event_id=event.id, name=name, rubric=rubric or RUBRIC))

    def team(self, event, name='Apollo Juniors', category='ElementarySchool'):
        return self._save(Team(event_id=event.id, name=name, school_name=f'{name} School',
                               category=category, language='English'))

    def slot(self, event, team, station, judges=(), start=None, minutes=30, captain=None):
        start = start or datetime.now() - timedelta(minutes=10)
        return self._save(ScheduleSlot(
            event_id=event.id, team_id=team.id, station_id=station.id,
            start_time=start, end_time=start + timedelta(minutes=minutes),
            judge_ids=[j.id for j in judges],
            captain_judge_id=captain.id if captain else None,
        ))

    def score(self, slot, judge, points):
        return self._save(Score(slot_id=slot.id, team_id=slot.team_id, station_id=slot.station_id,
                                judge_id=judge.id, points=points))


@pytest.fixture
def factory(app):
    return Factory(db.session)


@pytest.fixture
def login(client):
    def _login(user):
        with client.session_transaction() as sess:
            sess['user_id'] = user.id
        return client
    return _login


# --- Простые объекты для тестов чистой логики ---

NOW = datetime(2025, 5, 1, 12, 0)


def make_slot(id, team_id=1, station_id=1, start=None, end=None, judge_ids=(), captain=None, event_id=1):
    start = start or NOW - timedelta(minutes=10)
    end = end or start + timedelta(minutes=30)
    return SimpleNamespace(id=id, event_id=event_id, team_id=team_id, station_id=station_id,
                           start_time=start, end_time=end, judge_ids=list(judge_ids),
                           captain_judge_id=captain)


def make_score(slot, judge_id, points):
    return SimpleNamespace(slot_id=slot.id, team_id=slot.team_id, station_id=slot.station_id,
                           judge_id=judge_id, points=points)


def make_team(id, name, category='ElementarySchool'):
    return SimpleNamespace(id=id, name=name, category=category, school_name=f'{name} School',
                           language='English')


def make_named(id, name):
    return SimpleNamespace(id=id, name=name)


def make_user(id, role):
    return SimpleNamespace(id=id, role=role)
