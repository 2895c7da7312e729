# models/event.py

from extensions import db


class Event(db.Model):
    __tablename__ = 'events'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String, nullable=False)
    date = db.Column(db.DateTime, nullable=False)
    location = db.Column(db.String, nullable=True)
    note = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    manager_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    # Судьи, прикрепленные к мероприятию целиком (не к конкретным слотам)
    judge_ids = db.Column(db.JSON, nullable=False, default=list)

    # Каскадное удаление на уровне ORM: станции, команды, слоты и оценки уходят вместе с мероприятием
    stations = db.relationship('Station', backref='event', lazy=True, cascade="all, delete-orphan")
    teams = db.relationship('Team', backref='event', lazy=True, cascade="all, delete-orphan")
    slots = db.relationship('ScheduleSlot', backref='event', lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'date': self.date.isoformat() if self.date else None,
            'location': self.location,
            'note': self.note,
            'isActive': bool(self.is_active),
            'managerId': self.manager_id,
            'judgeIds': list(self.judge_ids or []),
        }
