class HabitTrackerError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(HabitTrackerError):
    status_code = 400
    message = 'Invalid request'


class DuplicateIdentity(HabitTrackerError):
    status_code = 409
    message = 'Email already registered'


class InvalidCredentials(HabitTrackerError):
    # Same message for unknown email and wrong password
    status_code = 401
    message = 'Invalid credentials'


class InvalidExternalToken(HabitTrackerError):
    status_code = 401
    message = 'Invalid Google token'


class InvalidToken(HabitTrackerError):
    status_code = 401
    message = 'Unauthorized'


class ConfigurationError(HabitTrackerError):
    status_code = 500
    message = 'Server is not configured'


class InfrastructureError(HabitTrackerError):
    status_code = 503
    message = 'Service temporarily unavailable'
