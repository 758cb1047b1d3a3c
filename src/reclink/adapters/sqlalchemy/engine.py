"""Engine lifecycle for the SQLAlchemy store gateway."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import create_engine

from reclink.config.storage import get_database_config

from .gateway import SqlAlchemyStoreGateway
from .tables import build_tables

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from .schema import SchemaDefinition


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy gateway is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    gateway: SqlAlchemyStoreGateway | None = None


_STATE = _AdapterState()


def startup(
    schema: SchemaDefinition,
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> SqlAlchemyStoreGateway:
    """Initialise the engine, create missing tables and return the gateway."""

    if _STATE.engine is not None:
        if not force:
            raise StartupError(
                "SQLAlchemy gateway already initialised. Pass force=True to reconfigure."
            )
        shutdown()

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri,
        future=True,
    )
    tables = build_tables(schema)
    tables.create_all(resolved_engine)

    _STATE.engine = resolved_engine
    _STATE.gateway = SqlAlchemyStoreGateway(engine=resolved_engine, schema=schema, tables=tables)
    return _STATE.gateway


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.gateway = None
