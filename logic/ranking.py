# logic/ranking.py
# Таблица лидеров, итоговые результаты и победители станций

from collections import defaultdict

from .rubric import score_total, team_totals


def _order_key(entry):
    # Больше баллов - выше; при равенстве по названию команды, затем по id
    return (-entry['total'], entry['team'].name.lower(), entry['team'].id)


def rank_teams(teams, scores, category=None):
    """
    Список команд по убыванию суммы баллов. Место - позиция в списке (1, 2, 3...),
    команды с одинаковой суммой место не делят.
    """
    totals = team_totals(scores)
    entries = [
        {'team': team, 'total': totals.get(team.id, 0)}
        for team in teams
        if category is None or team.category == category
    ]
    entries.sort(key=_order_key)
    for index, entry in enumerate(entries):
        entry['rank'] = index + 1
    return entries


def leaderboard(teams, scores):
    """{category: [entries]} - рейтинг внутри каждой категории."""
    categories = []
    for team in teams:
        if team.category not in categories:
            categories.append(team.category)
    return {category: rank_teams(teams, scores, category) for category in categories}


def station_winners(stations, teams, scores):
    """
    Победитель станции - команда со строго наибольшей суммой по этой станции.
    Без оценок победителя нет (None), а не команда с нулем.
    """
    teams_by_id = {team.id: team for team in teams}
    per_station = defaultdict(lambda: defaultdict(int))
    for score in scores:
        per_station[score.station_id][score.team_id] += score_total(score)

    winners = []
    for station in stations:
        best_team, best_total = None, None
        totals = per_station.get(station.id, {})
        candidates = [
            {'team': teams_by_id[team_id], 'total': total}
            for team_id, total in totals.items()
            if team_id in teams_by_id
        ]
        candidates.sort(key=_order_key)
        if candidates and candidates[0]['total'] > 0:
            best_team, best_total = candidates[0]['team'], candidates[0]['total']
        winners.append({'station': station, 'winner': best_team, 'bestScore': best_total})
    return winners


def entry_to_dict(entry):
    team = entry['team']
    return {
        'rank': entry['rank'],
        'teamId': team.id,
        'teamName': team.name,
        'schoolName': team.school_name,
        'category': team.category,
        'language': team.language,
        'totalScore': entry['total'],
    }


RESULT_COLUMNS = ('rank', 'teamName', 'schoolName', 'category', 'language', 'totalScore')


def results_rows(teams, scores, category=None):
    """Плоские строки для экспорта: (rank, team name, school, category, language, total)."""
    return [
        tuple(entry_to_dict(entry)[column] for column in RESULT_COLUMNS)
        for entry in rank_teams(teams, scores, category)
    ]
