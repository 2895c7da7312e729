# logic/rubric.py
# Рубрика станции и проверка баллов, которые присылает судья

from collections import defaultdict

from .errors import ValidationError


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def parse_rubric(raw):
    """
    Проверяет рубрику вида {"criteria": [{"name", "maxPoints", "note"?}]}
    и возвращает нормализованную копию. Порядок критериев сохраняется.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get('criteria'), list):
        raise ValidationError('Рубрика должна содержать список критериев.', field='rubric')

    criteria = []
    seen = set()
    for item in raw['criteria']:
        if not isinstance(item, dict):
            raise ValidationError('Каждый критерий должен быть объектом.', field='rubric')
        name = (item.get('name') or '').strip() if isinstance(item.get('name'), str) else ''
        if not name:
            raise ValidationError('У критерия должно быть название.', field='rubric')
        if name in seen:
            raise ValidationError(f'Критерий "{name}" указан дважды.', field='rubric')
        max_points = item.get('maxPoints')
        if not _is_int(max_points) or max_points <= 0:
            raise ValidationError(f'Максимальный балл критерия "{name}" должен быть больше нуля.', field='rubric')
        seen.add(name)

        criterion = {'name': name, 'maxPoints': max_points}
        if item.get('note'):
            criterion['note'] = item['note']
        criteria.append(criterion)

    return {'criteria': criteria}


def validate_points(rubric, points):
    """
    Сверяет баллы с рубрикой. Все ошибки собираются в одно исключение,
    чтобы интерфейс мог подсветить каждое поле отдельно.
    """
    if not isinstance(points, dict) or not points:
        raise ValidationError('Нужно выставить баллы хотя бы по одному критерию.', field='scores')

    max_by_name = {c['name']: c['maxPoints'] for c in (rubric or {}).get('criteria', [])}
    errors = {}
    for name, value in points.items():
        if name not in max_by_name:
            errors[name] = 'unknown criterion'
        elif not _is_int(value):
            errors[name] = 'must be a whole number'
        elif value < 0:
            errors[name] = 'cannot be negative'
        elif value > max_by_name[name]:
            errors[name] = f'exceeds maximum ({max_by_name[name]})'

    if errors:
        raise ValidationError('Оценка не соответствует рубрике станции.', field='scores', errors=errors)
    return dict(points)


def score_total(score):
    return sum((score.points or {}).values())


def team_totals(scores):
    """Сумма по всем оценкам команды: каждая оценка учитывается целиком, без усреднения."""
    totals = defaultdict(int)
    for score in scores:
        totals[score.team_id] += score_total(score)
    return dict(totals)
