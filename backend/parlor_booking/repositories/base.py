"""
Shared SQLAlchemy plumbing for repositories.

Repositories bound to the same session share one unit of work: write methods
only flush, and the outermost ``transaction()`` block commits or rolls back.
Storage errors leave this module already translated into the application's
error taxonomy.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from parlor_booking.core.exceptions import ConflictError, UnavailableError

logger = logging.getLogger(__name__)

_DEPTH_KEY = "parlor_booking.transaction_depth"


class SqlAlchemyRepository:
    """Base class holding the session and the transaction boundary."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    @property
    def dialect_name(self) -> str:
        bind = self.db.get_bind()
        return bind.dialect.name

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        depth = self.db.info.get(_DEPTH_KEY, 0)
        self.db.info[_DEPTH_KEY] = depth + 1
        try:
            yield self.db
            if depth == 0:
                self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                "Integrity constraint violated",
                extra={"context": {"error": str(e.orig)}},
            )
            raise ConflictError("Record conflicts with existing data") from e
        except DBAPIError as e:
            self.db.rollback()
            logger.error(
                "Database unavailable",
                extra={"context": {"error": str(e)}},
                exc_info=True,
            )
            raise UnavailableError("Storage is temporarily unavailable") from e
        except SQLAlchemyError:
            self.db.rollback()
            raise
        except Exception:
            if depth == 0:
                self.db.rollback()
            raise
        finally:
            self.db.info[_DEPTH_KEY] = depth
