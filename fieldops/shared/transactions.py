"""Unit of work helper shared by the domain services"""

import logging
from contextlib import contextmanager

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .errors import ConflictError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session):
    """
    Commit everything written inside the block, or nothing.

    A row changed by another request since it was read (version mismatch)
    surfaces as ConflictError.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.warning(f"⚠️ Concurrent modification detected: {e}")
        raise ConflictError(
            "This record was changed by another request. Reload and try again."
        ) from e
    except Exception:
        db.rollback()
        raise
