# app.py
# Основной файл Flask-приложения с использованием паттерна Application Factory

import logging

from flask import Flask, jsonify
from config import Config
from extensions import db, migrate
from repository import Repository
from logic.errors import JudgingError

# Важно импортировать модели здесь, чтобы Alembic (Migrate) мог их видеть
from models import User, Event, Station, Team, ScheduleSlot, Score, Notification, AuthorizedEmail  # noqa: F401


def create_app(config_class=Config):
    # Создаем экземпляр приложения
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    logging.getLogger().setLevel(app.config['LOG_LEVEL'])

    # --- Инициализируем расширения С ПРИЛОЖЕНИЕМ ---
    db.init_app(app)
    migrate.init_app(app, db)

    # Один репозиторий на процесс, маршруты берут его через get_repository()
    app.extensions['repository'] = Repository(db)

    @app.errorhandler(JudgingError)
    def handle_judging_error(error):
        # Незавершенные изменения не должны попасть в следующий commit
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'message': 'Не найдено.'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'message': 'Метод не поддерживается.'}), 405

    # --- Регистрируем наши Blueprints (маршруты) ---
    from routes.auth import auth_bp
    from routes.main import main_bp
    from routes.admin import admin_bp
    from routes.judge import judge_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(judge_bp)

    return app
