from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from src.app.services.unit_of_work import DirectoryError


@contextmanager
def directory_errors(operation: str):
    """Re-raise database failures as DirectoryError"""
    try:
        yield
    except SQLAlchemyError as exc:
        raise DirectoryError(f"{operation} failed: {exc}") from exc
