"""
➡️ But : Une seule taxonomie d'erreurs métier, partagée par services et routes.

Les repositories renvoient None pour "introuvable" ; les services lèvent ces
exceptions ; main.py les convertit en JSON {"error", "details"} avec le bon code HTTP.
"""

from typing import Any, Optional

from fastapi import status


class ReviewError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(ReviewError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ReviewError):
    # doublon (ex: nom de dossier) : 400 côté client
    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenError(ReviewError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ReviewError):
    status_code = status.HTTP_404_NOT_FOUND


class RangeNotSatisfiableError(ReviewError):
    status_code = status.HTTP_416_RANGE_NOT_SATISFIABLE

    def __init__(self, message: str, *, file_size: int, details: Optional[Any] = None):
        super().__init__(message, details=details)
        self.file_size = file_size


class StorageError(ReviewError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class PersistenceError(ReviewError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
