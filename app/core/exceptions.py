"""
HTTP-facing exceptions. Each carries a machine code and a human message in `detail`.
"""
from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base for API errors with {code, message} detail."""

    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(status_code=status_code, detail={"code": code, "message": message})


class NotAuthenticated(AppException):
    def __init__(self, message: str = "Authentication required."):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "NOT_AUTHENTICATED", message)


class SessionExpired(AppException):
    def __init__(self, message: str = "Session expired or invalid. Please log in again."):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "SESSION_EXPIRED", message)


class InvalidCredentials(AppException):
    def __init__(self, message: str = "Invalid email or password."):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS", message)


class Forbidden(AppException):
    def __init__(self, message: str = "Not authorized."):
        super().__init__(status.HTTP_403_FORBIDDEN, "FORBIDDEN", message)


class NotFound(AppException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, "NOT_FOUND", f"{resource} not found.")


class InvalidRoom(AppException):
    def __init__(self, message: str = "Invalid room."):
        super().__init__(status.HTTP_400_BAD_REQUEST, "INVALID_ROOM", message)


class BadRequest(AppException):
    def __init__(self, code: str, message: str):
        super().__init__(status.HTTP_400_BAD_REQUEST, code, message)


class EmailAlreadyExists(AppException):
    def __init__(self, message: str = "An account with this email already exists."):
        super().__init__(status.HTTP_409_CONFLICT, "EMAIL_EXISTS", message)
