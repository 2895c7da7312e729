# logic/slot_status.py
# Единственное место, где решается, оценен слот, идет, ждет или отстает от графика.
# Статус всегда вычисляется заново и никогда не берется из ScheduleSlot.status.

from collections import defaultdict
from datetime import datetime

PENDING = 'pending'
ONGOING = 'ongoing'
COMPLETE = 'complete'
BEHIND = 'behind'

# Сводный статус слота с несколькими судьями
PARTIAL = 'partial'
NO_JUDGES = 'no_judges'

# Ячейка матрицы, для которой нет слота
NO_SLOT = 'no_slot'


def current_time():
    return datetime.now()


def index_scores(scores):
    """{slot_id: {judge_id, ...}} - строится один раз на запрос."""
    scored = defaultdict(set)
    for score in scores:
        scored[score.slot_id].add(score.judge_id)
    return scored


def time_status(slot, now):
    if now < slot.start_time:
        return PENDING
    if now < slot.end_time:
        return ONGOING
    return BEHIND


def slot_status(slot, scored_judge_ids, now=None, judge_id=None):
    """
    Статус пары (слот, судья), либо всего слота, если judge_id не указан.
    Наличие оценки важнее времени: слот, оцененный после окончания, - complete, а не behind.
    """
    now = now or current_time()
    scored_judge_ids = scored_judge_ids or set()
    if judge_id is None:
        if scored_judge_ids:
            return COMPLETE
    elif judge_id in scored_judge_ids:
        return COMPLETE
    return time_status(slot, now)


def slot_scoring_status(slot, scored_judge_ids):
    assigned = set(slot.judge_ids or [])
    if not assigned:
        return NO_JUDGES
    scored = assigned & set(scored_judge_ids or ())
    if scored == assigned:
        return COMPLETE
    if scored:
        return PARTIAL
    return PENDING


def progress_summary(slots, scores, now=None):
    """Счетчики для дашборда менеджера."""
    now = now or current_time()
    scored = index_scores(scores)

    summary = {
        'total': 0,
        COMPLETE: 0,
        PARTIAL: 0,
        PENDING: 0,
        NO_JUDGES: 0,
        BEHIND: 0,
    }
    for slot in slots:
        summary['total'] += 1
        summary[slot_scoring_status(slot, scored.get(slot.id))] += 1
        if slot_status(slot, scored.get(slot.id), now) == BEHIND:
            summary[BEHIND] += 1

    total = summary['total']
    summary['progress_percent'] = round(summary[COMPLETE] / total * 100, 1) if total else 0
    return summary
