from sqlalchemy.exc import IntegrityError, NoResultFound, OperationalError
from domain.exceptions import SetlistManagerError

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

def format_error(error) -> str:
    """Turn an exception (or a plain string) into a message fit for an alert banner."""
    if isinstance(error, str):
        return error

    if isinstance(error, SetlistManagerError):
        return error.message

    if isinstance(error, NoResultFound):
        return "Record not found"

    if isinstance(error, IntegrityError):
        return "A database constraint was violated. Please check your input."

    if isinstance(error, (OperationalError, TimeoutError)):
        return "Request timed out. Please try again."

    return str(error) or DEFAULT_ERROR_MESSAGE
