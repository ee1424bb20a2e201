from typing import Any, Dict, List, Optional


class SetlistManagerError(Exception):
    """Base class for errors raised by the app services."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message}


class ValidationError(SetlistManagerError):
    status_code = 400


class AuthenticationError(SetlistManagerError):
    status_code = 401


class PermissionDeniedError(SetlistManagerError):
    status_code = 403


class NotFoundError(SetlistManagerError):
    status_code = 404


class ConflictError(SetlistManagerError):
    status_code = 409


class DuplicateSongsError(ConflictError):
    """
    Songs submitted for a set already live in another set of the same setlist.
    Serialised with type DUPLICATES_FOUND so the client can offer
    "keep in current set" / "keep in original set".
    """
    type = "DUPLICATES_FOUND"

    def __init__(self, duplicates: List[Dict[str, Any]], message: Optional[str] = None):
        super().__init__(message or "Some songs already exist in other sets of this setlist.")
        self.duplicates = duplicates

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "detail": self.message,
            "duplicates": self.duplicates,
        }
