# models/notification.py

from datetime import datetime
from extensions import db


class Notification(db.Model):
    __tablename__ = 'notifications'
    id = db.Column(db.Integer, primary_key=True)
    judge_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'judgeId': self.judge_id,
            'message': self.message,
            'isRead': bool(self.is_read),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
