from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

from sqlalchemy import UniqueConstraint, func, or_, select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ConflictError, DomainError, InternalError, NotFoundError
from ..time_utils import utcnow

logger = logging.getLogger(__name__)

# Foreign keys with these ON DELETE actions never block deleting the parent
_NON_BLOCKING_ONDELETE = {"CASCADE", "SET NULL"}

# Largest OFFSET the drivers bind as a signed 64-bit integer
MAX_SQL_OFFSET = 2**63 - 1


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def translate_db_error(exc: SQLAlchemyError) -> DomainError:
    """Map a driver/ORM failure to an error kind without leaking the raw DB message."""
    if isinstance(exc, IntegrityError):
        return ConflictError("constraint violation")
    if isinstance(exc, OperationalError):
        # lock wait exhausted or statement_timeout elapsed
        return InternalError("database operation timed out or was cancelled")
    return InternalError("database error")


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """
    One database transaction around a usecase.

    Commits on success. Any exception rolls back; SQLAlchemy errors are
    translated to error kinds on the way out.
    """
    try:
        yield session
        session.commit()
    except DomainError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("transaction rolled back: %s", exc.__class__.__name__)
        raise translate_db_error(exc) from exc
    except Exception:
        session.rollback()
        raise


class SQLAlchemyRepository:
    """
    Generic persistence adapter for one aggregate.

    Writes only flush; the caller owns the transaction boundary (see atomic()).
    Reads return ORM entities; NotFoundError is raised for missing ids/keys.
    """

    def __init__(self, model, session_factory, label: Optional[str] = None):
        self.model = model
        self._session_factory = session_factory
        self.label = label or model.__name__

    @property
    def session(self) -> Session:
        return self._session_factory()

    @property
    def table(self):
        return self.model.__table__

    # ---- reads -------------------------------------------------------------

    def find(self, entity_id: int):
        return self._run(lambda: self.session.get(self.model, entity_id))

    def get(self, entity_id: int):
        entity = self.find(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.label.lower()} {entity_id} does not exist")
        return entity

    def get_by(self, field: str, value: Any):
        stmt = select(self.model).where(getattr(self.model, field) == value)
        entity = self._run(lambda: self.session.execute(stmt).scalars().first())
        if entity is None:
            raise NotFoundError(f"no {self.label.lower()} with {field} {value!r}")
        return entity

    def list(self, limit: int, offset: int, **filters) -> list:
        stmt = select(self.model)
        for field, value in filters.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        return self._page(stmt, limit, offset)

    def search(self, q: str, fields: Iterable[str], limit: int, offset: int) -> list:
        pattern = f"%{_escape_like(q.lower())}%"
        clauses = [func.lower(getattr(self.model, f)).like(pattern, escape="\\") for f in fields]
        stmt = select(self.model).where(or_(*clauses))
        return self._page(stmt, limit, offset)

    def all_where(self, *criteria) -> list:
        stmt = select(self.model).where(*criteria).order_by(self.model.id.asc())
        return self._run(lambda: list(self.session.execute(stmt).scalars()))

    def _page(self, stmt, limit: int, offset: int) -> list:
        if offset > MAX_SQL_OFFSET:
            return []
        stmt = stmt.order_by(self.model.id.asc()).limit(limit).offset(offset)
        return self._run(lambda: list(self.session.execute(stmt).scalars()))

    # ---- writes ------------------------------------------------------------

    def add(self, values: dict):
        entity = self.model(**values)
        self.session.add(entity)
        self._flush(values)
        return entity

    def update(self, entity, values: dict):
        for k, v in values.items():
            setattr(entity, k, v)
        if hasattr(entity, "updated_at"):
            # onupdate only fires when a column actually changed
            entity.updated_at = utcnow()
        self._flush(values)
        return entity

    def delete(self, entity) -> None:
        blockers = self.referencing_tables(entity.id)
        if blockers:
            raise ConflictError(
                f"{self.label.lower()} {entity.id} is still referenced by {', '.join(blockers)}"
            )
        self.session.delete(entity)
        self._flush({})

    def referencing_tables(self, entity_id: int) -> list[str]:
        """
        Names of tables holding rows that point at this entity through a
        restricting foreign key. Owned rows (ON DELETE CASCADE / SET NULL) are not counted.
        """
        blockers: list[str] = []
        for table in self.table.metadata.sorted_tables:
            for fk in table.foreign_keys:
                if fk.column.table is not self.table:
                    continue
                if (fk.ondelete or "").upper() in _NON_BLOCKING_ONDELETE:
                    continue
                stmt = select(func.count()).select_from(table).where(fk.parent == entity_id)
                if self._run(lambda: self.session.execute(stmt).scalar_one()):
                    blockers.append(table.name)
                    break
        return blockers

    def missing_references(self, values: dict) -> list[str]:
        """Foreign-key fields in `values` whose target row does not exist."""
        missing: list[str] = []
        for col in self.table.columns:
            value = values.get(col.key)
            if value is None or not col.foreign_keys:
                continue
            target = next(iter(col.foreign_keys)).column
            stmt = select(func.count()).select_from(target.table).where(target == value)
            if not self._run(lambda: self.session.execute(stmt).scalar_one()):
                missing.append(col.key)
        return missing

    # ---- error translation -------------------------------------------------

    def _run(self, fn):
        try:
            return fn()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise translate_db_error(exc) from exc

    def _flush(self, values: dict) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError(self._conflict_detail(values)) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise translate_db_error(exc) from exc

    def _conflict_detail(self, values: dict) -> str:
        # Name the unique field that collided, re-checked after rollback
        for constraint in self.table.constraints:
            if not isinstance(constraint, UniqueConstraint) or len(constraint.columns) != 1:
                continue
            col = next(iter(constraint.columns))
            value = values.get(col.key)
            if value is None:
                continue
            stmt = select(func.count()).select_from(self.table).where(col == value)
            try:
                taken = self.session.execute(stmt).scalar_one()
            except SQLAlchemyError:
                break
            if taken:
                return f"{self.label.lower()} with {col.key} {value!r} already exists"
        return f"{self.label.lower()} violates a uniqueness or integrity constraint"
