# models/__init__.py
# Инициализация моделей

from .user import User, ROLES
from .event import Event
from .station import Station
from .team import Team
from .schedule_slot import ScheduleSlot
from .score import Score
from .notification import Notification
from .authorized_email import AuthorizedEmail
