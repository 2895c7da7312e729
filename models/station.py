# models/station.py

from extensions import db


class Station(db.Model):
    __tablename__ = 'stations'
    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String, nullable=False)
    # {"criteria": [{"name": "Speed", "maxPoints": 10, "note": "..."}]}
    rubric = db.Column(db.JSON, nullable=False)
    note = db.Column(db.Text, nullable=True)

    @property
    def criteria(self):
        return list((self.rubric or {}).get('criteria', []))

    def to_dict(self):
        return {
            'id': self.id,
            'eventId': self.event_id,
            'name': self.name,
            'rubric': self.rubric,
            'note': self.note,
        }
