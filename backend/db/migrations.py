"""Database migration utilities"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# table -> {column: DDL type + default}
PRICE_COLUMNS = {
    "delivery_history": {
        "latest_unit_price_data": "JSONB NOT NULL DEFAULT '[]'::jsonb",
    },
    "sale": {
        "main_unit_price": "NUMERIC",
    },
    "stock": {
        "stock_batch_id": "UUID REFERENCES stock_batch(id)",
    },
}


async def _existing_columns(conn, table: str) -> set:
    result = await conn.execute(
        text("""
            SELECT column_name
            FROM information_schema.columns
            WHERE table_name = :table
        """),
        {"table": table},
    )
    return {row[0] for row in result.fetchall()}


async def add_missing_price_columns(engine: AsyncEngine) -> list:
    """Add the price snapshot columns to tables created before they existed (PostgreSQL only).

    Returns the "table.column" names that were added.
    """
    if engine.dialect.name != "postgresql":
        logger.info("Skipping column migrations on %s", engine.dialect.name)
        return []

    added = []
    async with engine.begin() as conn:
        for table, columns in PRICE_COLUMNS.items():
            existing = await _existing_columns(conn, table)
            if not existing:
                # table not created yet; create_all handles it
                continue
            for column_name, ddl in columns.items():
                if column_name in existing:
                    logger.debug("%s.%s already exists", table, column_name)
                    continue
                logger.info("Adding %s column to %s table...", column_name, table)
                await conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column_name} {ddl}"))
                added.append(f"{table}.{column_name}")
                logger.info("Successfully added %s column to %s table", column_name, table)
    return added
