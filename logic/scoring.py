# logic/scoring.py
# Прием оценок от судей

import logging
from datetime import datetime

from models import Score
from .access import ensure_can_submit
from .errors import ValidationError
from .rubric import validate_points

logger = logging.getLogger(__name__)


def submit_score(repo, user, slot_id, points, feedback=None):
    """
    Сохраняет оценку судьи за слот.

    Повторная отправка той же парой (слот, судья) заменяет прежнюю оценку,
    поэтому в сумме команды она учитывается один раз.
    Возвращает (score, created).
    """
    slot = repo.get_slot(slot_id)
    event = repo.get_event(slot.event_id)
    ensure_can_submit(user, slot, event)

    if feedback is not None and not isinstance(feedback, str):
        raise ValidationError('Отзыв должен быть текстом.', field='feedback')
    points = validate_points(slot.station.rubric, points)

    score = repo.find_score(slot.id, user.id)
    created = score is None
    if created:
        score = repo.add(Score(slot_id=slot.id, judge_id=user.id))

    # Денормализованные поля всегда берутся из слота
    score.team_id = slot.team_id
    score.station_id = slot.station_id
    score.points = points
    score.feedback = (feedback or '').strip() or None
    score.submitted_at = datetime.now()
    repo.commit()

    if created:
        logger.info('Судья %s оценил слот %s (команда %s, станция %s)',
                    user.id, slot.id, slot.team_id, slot.station_id)
    else:
        logger.info('Судья %s обновил оценку за слот %s', user.id, slot.id)
    return score, created
