# asobot/utils/db.py
import logging

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from asobot import db
from asobot.errors import ConflictError, DependencyError

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    'sqlite': sqlite.insert,
    'postgresql': postgresql.insert,
}


def upsert(model, values: dict, conflict_columns, update_columns) -> None:
    """Insert *values* into *model*'s table, updating *update_columns* when a
    row with the same *conflict_columns* already exists.

    Emitted as a single INSERT ... ON CONFLICT DO UPDATE statement so two
    submissions for the same key never lose an update between a read and a
    write.
    """
    dialect = db.session.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise DependencyError(f"Upsert not supported on database dialect '{dialect}'")

    stmt = insert(model.__table__).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={col: stmt.excluded[col] for col in update_columns},
    )
    try:
        db.session.execute(stmt)
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Upsert into %s failed: %s", model.__tablename__, exc)
        raise DependencyError(f"Failed to save {model.__tablename__} row") from exc


def insert_ignore(model, values: dict, conflict_columns) -> None:
    """INSERT ... ON CONFLICT DO NOTHING for idempotent link rows."""
    dialect = db.session.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise DependencyError(f"Upsert not supported on database dialect '{dialect}'")

    stmt = insert(model.__table__).values(**values).on_conflict_do_nothing(index_elements=list(conflict_columns))
    try:
        db.session.execute(stmt)
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Insert into %s failed: %s", model.__tablename__, exc)
        raise DependencyError(f"Failed to save {model.__tablename__} row") from exc


def insert_unique(instance) -> None:
    """Add and commit *instance*, raising ConflictError on a unique violation."""
    db.session.add(instance)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ConflictError(f"Duplicate {type(instance).__tablename__} row") from exc


def commit() -> None:
    """Commit the session, rolling back and raising DependencyError on failure."""
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Database commit failed: %s", exc)
        raise DependencyError("Database write failed") from exc
