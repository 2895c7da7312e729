# repository.py
# Доступ к данным. Один экземпляр создается в create_app и хранится в app.extensions,
# маршруты получают его через get_repository(). В тестах его легко подменить.

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import User, Event, Station, Team, ScheduleSlot, Score, Notification, AuthorizedEmail
from logic.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class Repository:
    def __init__(self, db):
        self.db = db

    @property
    def session(self):
        return self.db.session

    # --- Общие операции ---

    def _get_or_raise(self, model, object_id, message):
        obj = self.session.get(model, object_id) if object_id is not None else None
        if obj is None:
            raise NotFoundError(message)
        return obj

    def add(self, obj):
        self.session.add(obj)
        return obj

    def delete(self, obj):
        self.session.delete(obj)

    def commit(self):
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info('Нарушение целостности при сохранении: %s', e.orig)
            raise ValidationError('Запись конфликтует с существующими данными.') from e

    def rollback(self):
        self.session.rollback()

    # --- Пользователи ---

    def get_user(self, user_id):
        return self.session.get(User, user_id) if user_id is not None else None

    def require_user(self, user_id):
        return self._get_or_raise(User, user_id, 'Пользователь не найден.')

    def get_user_by_username(self, username):
        return User.query.filter_by(username=username).first()

    def list_judges(self):
        return User.query.filter_by(role='judge').order_by(User.name).all()

    def list_users(self, ids):
        if not ids:
            return []
        return User.query.filter(User.id.in_(list(ids))).order_by(User.name).all()

    # --- Мероприятия ---

    def list_events(self):
        return Event.query.order_by(Event.date.desc(), Event.id).all()

    def get_event(self, event_id):
        return self._get_or_raise(Event, event_id, 'Мероприятие не найдено.')

    # --- Станции, команды, слоты ---

    def list_stations(self, event_id):
        return Station.query.filter_by(event_id=event_id).order_by(Station.id).all()

    def get_station(self, station_id):
        return self._get_or_raise(Station, station_id, 'Станция не найдена.')

    def list_teams(self, event_id):
        return Team.query.filter_by(event_id=event_id).order_by(Team.id).all()

    def get_team(self, team_id):
        return self._get_or_raise(Team, team_id, 'Команда не найдена.')

    def list_slots(self, event_id=None):
        query = ScheduleSlot.query
        if event_id is not None:
            query = query.filter_by(event_id=event_id)
        return query.order_by(ScheduleSlot.start_time, ScheduleSlot.id).all()

    def get_slot(self, slot_id):
        return self._get_or_raise(ScheduleSlot, slot_id, 'Слот не найден.')

    # --- Оценки ---

    def list_scores(self, event_id):
        return (
            Score.query
            .join(ScheduleSlot, Score.slot_id == ScheduleSlot.id)
            .filter(ScheduleSlot.event_id == event_id)
            .order_by(Score.id)
            .all()
        )

    def find_score(self, slot_id, judge_id):
        return Score.query.filter_by(slot_id=slot_id, judge_id=judge_id).first()

    def judge_has_scores(self, judge_id):
        return Score.query.filter_by(judge_id=judge_id).first() is not None

    # --- Уведомления ---

    def list_notifications(self, judge_id=None):
        query = Notification.query
        if judge_id is not None:
            query = query.filter_by(judge_id=judge_id)
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    def get_notification(self, notification_id):
        return self._get_or_raise(Notification, notification_id, 'Уведомление не найдено.')

    # --- Разрешенные email ---

    def list_authorized_emails(self):
        return AuthorizedEmail.query.order_by(AuthorizedEmail.created_at.desc(), AuthorizedEmail.id).all()

    def get_authorized_email(self, entry_id):
        return self._get_or_raise(AuthorizedEmail, entry_id, 'Запись не найдена.')

    def find_authorized_email(self, email):
        return AuthorizedEmail.query.filter_by(email=email.strip().lower()).first()


def get_repository():
    return current_app.extensions['repository']
