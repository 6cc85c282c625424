"""Error taxonomy shared by the stores, the session and the HTTP layer."""


class ScoutError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(ScoutError):
    status_code = 404


class ValidationFailed(ScoutError):
    status_code = 400


class Unauthenticated(ScoutError):
    status_code = 401

    def __init__(self, message: str = "You must be logged in to do that"):
        super().__init__(message)


class Conflict(ScoutError):
    status_code = 409
