# models/authorized_email.py
# Заранее одобренные адреса: при первом входе через соцсеть пользователь получает указанную роль

from extensions import db
from sqlalchemy import CheckConstraint


class AuthorizedEmail(db.Model):
    __tablename__ = 'authorized_emails'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    role = db.Column(db.String, nullable=False)
    name = db.Column(db.String(200), nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())
    created_by = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'manager', 'judge')", name="check_authorized_role"),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'role': self.role,
            'name': self.name,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'createdBy': self.created_by,
        }
