# models/team.py

from extensions import db


class Team(db.Model):
    __tablename__ = 'teams'
    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String, nullable=False)
    school_name = db.Column(db.String, nullable=False)
    city = db.Column(db.String, nullable=True)
    country = db.Column(db.String, nullable=True)
    # 'ElementarySchool', 'MiddleSchool' или 'HighSchool'
    category = db.Column(db.String(50), nullable=False)
    language = db.Column(db.String(50), nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'eventId': self.event_id,
            'name': self.name,
            'schoolName': self.school_name,
            'city': self.city,
            'country': self.country,
            'category': self.category,
            'language': self.language,
        }
