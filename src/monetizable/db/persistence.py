from __future__ import annotations

import logging
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from monetizable.db.validation import FieldError, install_flush_guard, validate_record
from monetizable.errors import MoneyValidationError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


class RecordRepository:
    """Saves records the way an active-record ``save`` does: invalid money columns yield ``False``."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self.errors: list[FieldError] = []
        install_flush_guard(session)

    def save(self, record: object) -> bool:
        # Reading expired columns must not flush the values being validated.
        with self._session.no_autoflush:
            self.errors = validate_record(record)
        if self.errors:
            logger.info("Not saving %s: %s", type(record).__name__, "; ".join(map(str, self.errors)))
            # A rejected record leaves the session until it is saved again, so
            # later commits cannot write its pending values.
            if record in self._session:
                self._session.expunge(record)
            return False

        self._session.add(record)
        self._session.commit()
        self._session.refresh(record)
        return True

    def create(self, record: RecordT) -> RecordT:
        if not self.save(record):
            raise MoneyValidationError(self.errors)
        return record

    def get(self, model: type[RecordT], record_id: Any) -> RecordT | None:
        return self._session.get(model, record_id)

    def list(self, model: type[RecordT]) -> list[RecordT]:
        return list(self._session.scalars(select(model)).all())
