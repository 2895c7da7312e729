# config.py
# Конфигурация приложения Flask

import os

class Config:
    # Абсолютный путь к базе данных
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f'sqlite:///{os.path.join(BASE_DIR, "instance", "olympics.db")}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get('SECRET_KEY', 'your-secret-key-change-me')  # Замени на случайный ключ в продакшене

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Как часто дашборды менеджера перезапрашивают прогресс (секунды)
    POLL_INTERVAL_SECONDS = int(os.environ.get('POLL_INTERVAL_SECONDS', 10))

    MAX_JUDGE_IMPORT = 100
    TEAM_CATEGORIES = ('ElementarySchool', 'MiddleSchool', 'HighSchool')

    # Отправка SMS не реализована, уведомления только сохраняются
    SMS_ENABLED = os.environ.get('SMS_ENABLED', '').lower() in ('1', 'true', 'yes')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'test'
    LOG_LEVEL = 'WARNING'
