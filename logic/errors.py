# logic/errors.py
# Типизированные ошибки ядра. Маршруты превращают их в JSON-ответы (см. app.py)


class JudgingError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'message': self.message}


class ValidationError(JudgingError, ValueError):
    """Некорректные входные данные: превышение максимума, конец слота раньше начала и т.п."""

    status_code = 400

    def __init__(self, message, field=None, errors=None):
        super().__init__(message)
        self.field = field
        # Ошибки по отдельным полям, например {"Speed": "exceeds maximum (10)"}
        self.errors = errors or {}

    def to_dict(self):
        data = {'message': self.message}
        if self.field:
            data['field'] = self.field
        if self.errors:
            data['errors'] = self.errors
        return data


class AuthorizationError(JudgingError):
    status_code = 403


class NotFoundError(JudgingError):
    status_code = 404
