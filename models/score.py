from datetime import datetime
from extensions import db


class Score(db.Model):
    __tablename__ = 'scores'
    id = db.Column(db.Integer, primary_key=True)
    slot_id = db.Column(db.Integer, db.ForeignKey('schedule_slots.id', ondelete='CASCADE'), nullable=False, index=True)
    # Денормализованные поля, копируются из слота при сохранении оценки
    team_id = db.Column(db.Integer, db.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True)
    station_id = db.Column(db.Integer, db.ForeignKey('stations.id', ondelete='CASCADE'), nullable=False, index=True)
    judge_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    # {"Speed": 7, "Accuracy": 9}
    points = db.Column(db.JSON, nullable=False)
    feedback = db.Column(db.Text, nullable=True)
    submitted_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    judge = db.relationship('User')

    __table_args__ = (
        # Повторная отправка той же парой (слот, судья) перезаписывает оценку
        db.UniqueConstraint('slot_id', 'judge_id', name='unique_slot_judge_score'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'slotId': self.slot_id,
            'teamId': self.team_id,
            'stationId': self.station_id,
            'judgeId': self.judge_id,
            'scores': dict(self.points or {}),
            'feedback': self.feedback,
            'timestamp': self.submitted_at.isoformat() if self.submitted_at else None,
        }
