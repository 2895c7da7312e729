from datetime import datetime, timedelta
from app import create_app
from extensions import db
from models import User, Event, Station, Team, ScheduleSlot, Score, Notification, AuthorizedEmail

# Создаем экземпляр приложения, чтобы получить контекст
app = create_app()


def make_user(username, role, name):
    user = User(username=username, role=role, name=name, languages=['English'])
    user.set_password('password')
    return user


with app.app_context():
    db.create_all()

    # --- 1. ОЧИСТКА ДАННЫХ ---
    print("Очистка старых данных...")
    # Идем в обратном порядке зависимостей
    db.session.query(Score).delete()
    db.session.query(ScheduleSlot).delete()
    db.session.query(Team).delete()
    db.session.query(Station).delete()
    db.session.query(Event).delete()
    db.session.query(Notification).delete()
    db.session.query(AuthorizedEmail).delete()
    db.session.query(User).delete()
    db.session.commit()
    print("Очистка завершена.")

    # --- 2. СОЗДАНИЕ ДАННЫХ ---
    print("Добавление тестовых данных...")

    try:
        admin = make_user('admin', 'admin', 'System Admin')
        manager = make_user('manager', 'manager', 'Event Manager')
        judge1 = make_user('judge1', 'judge', 'Judge Dredd')
        judge2 = make_user('judge2', 'judge', 'Judge Smith')
        judge3 = make_user('judge3', 'judge', 'Judge Johnson')
        db.session.add_all([admin, manager, judge1, judge2, judge3])
        db.session.commit()

        event = Event(
            name='Space Olympics 2025', date=datetime.now(), location='Mars Base Alpha',
            manager_id=manager.id, judge_ids=[judge1.id, judge2.id, judge3.id],
        )
        db.session.add(event)
        db.session.commit()

        station_rover = Station(event_id=event.id, name='Rover Navigation', rubric={'criteria': [
            {'name': 'Speed', 'maxPoints': 10},
            {'name': 'Accuracy', 'maxPoints': 10},
            {'name': 'Innovation', 'maxPoints': 5},
        ]})
        station_repair = Station(event_id=event.id, name='Zero-G Repair', rubric={'criteria': [
            {'name': 'Technique', 'maxPoints': 15},
            {'name': 'Safety', 'maxPoints': 10},
        ]})
        team_apollo = Team(event_id=event.id, name='Apollo Juniors', school_name='Armstrong Elementary',
                           category='ElementarySchool', language='English')
        team_curiosity = Team(event_id=event.id, name='Curiosity Rovers', school_name='Gagarin Middle School',
                              category='MiddleSchool', language='English')
        db.session.add_all([station_rover, station_repair, team_apollo, team_curiosity])
        db.session.commit()

        now = datetime.now()
        # Слот через час
        upcoming = ScheduleSlot(
            event_id=event.id, station_id=station_rover.id, team_id=team_apollo.id,
            start_time=now + timedelta(hours=1), end_time=now + timedelta(minutes=90),
            judge_ids=[judge1.id], captain_judge_id=judge1.id,
        )
        # Слот уже закончился, а оценки нет - будет "behind"
        overdue = ScheduleSlot(
            event_id=event.id, station_id=station_rover.id, team_id=team_curiosity.id,
            start_time=now - timedelta(hours=1), end_time=now - timedelta(minutes=30),
            judge_ids=[judge1.id], captain_judge_id=judge1.id,
        )
        db.session.add_all([upcoming, overdue])
        db.session.commit()

        print("Тестовые данные успешно добавлены!")
    except Exception as e:
        db.session.rollback()
        print(f"Произошла ошибка при добавлении данных: {e}")
        raise
