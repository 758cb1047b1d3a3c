"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any

from reclink.adapters.parsers import parse_input_data
from reclink.adapters.sqlalchemy import build_tables, shutdown, startup
from reclink.config import get_import_config
from reclink.domain.ports.parsing import InputFormat
from reclink.domain.reconciliation import ImportOptions, import_batch
from reclink.domain.records import Actor

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from reclink.adapters.sqlalchemy import SchemaDefinition
    from reclink.config import ImportConfig
    from reclink.domain.outcomes import ImportReport
    from reclink.domain.ports import RecordParser, StoreGateway


log = getLogger(__name__)


def run_import(
    raw_rows: object,
    *,
    collection: str,
    input_format: InputFormat | str,
    actor_id: Any,
    schema: SchemaDefinition | None = None,
    gateway: StoreGateway | None = None,
    parser: RecordParser = parse_input_data,
    config: ImportConfig | None = None,
    database_uri: str | None = None,
) -> ImportReport:
    """Import ``raw_rows`` into ``collection`` and return the failure report.

    Either a ready ``gateway`` or a ``schema`` (to start the SQLAlchemy gateway
    with) must be given. A gateway started here is shut down again on return.
    """

    effective_config = config or get_import_config()
    options = ImportOptions(
        collection=collection,
        format=InputFormat(input_format),
        actor=Actor(id=actor_id),
    )
    owns_gateway = gateway is None
    effective_gateway = gateway or _start_gateway(schema, database_uri=database_uri)
    log.info("Importing into %s as actor %s", collection, actor_id)
    try:
        return asyncio.run(
            import_batch(
                raw_rows,
                options=options,
                store=effective_gateway,
                parser=parser,
                strip_stale_id=effective_config.strip_stale_id,
            )
        )
    finally:
        if owns_gateway:
            shutdown()


def initialise_database(
    schema: SchemaDefinition,
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
) -> None:
    """Create the tables described by ``schema`` if they do not exist yet."""

    if engine is not None:
        build_tables(schema).create_all(engine)
        return
    startup(schema, database_uri=database_uri, force=True)
    shutdown()
    log.info("Initialised %s collections", len(schema.collections))


def _start_gateway(schema: SchemaDefinition | None, *, database_uri: str | None) -> StoreGateway:
    if schema is None:
        raise ValueError("run_import needs either a gateway or a schema")
    return startup(schema, database_uri=database_uri, force=True)
