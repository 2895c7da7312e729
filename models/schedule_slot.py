from extensions import db
from sqlalchemy import CheckConstraint


class ScheduleSlot(db.Model):
    __tablename__ = 'schedule_slots'

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True)
    station_id = db.Column(db.Integer, db.ForeignKey('stations.id', ondelete='CASCADE'), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)

    # Список id назначенных судей; капитан обязан входить в этот список
    judge_ids = db.Column(db.JSON, nullable=False, default=list)
    captain_judge_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)

    # Статус из базы только информационный ('pending', 'behind', ...).
    # Настоящий статус всегда пересчитывается в logic.slot_status
    status = db.Column(db.String(50), nullable=True, default='pending')

    station = db.relationship('Station', backref=db.backref('slots', lazy=True, cascade="all, delete"))
    team = db.relationship('Team', backref=db.backref('slots', lazy=True, cascade="all, delete"))
    scores = db.relationship('Score', backref='slot', lazy=True, cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="check_slot_window"),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'eventId': self.event_id,
            'stationId': self.station_id,
            'teamId': self.team_id,
            'startTime': self.start_time.isoformat(),
            'endTime': self.end_time.isoformat(),
            'judgeIds': list(self.judge_ids or []),
            'captainJudgeId': self.captain_judge_id,
            'status': self.status,
        }
