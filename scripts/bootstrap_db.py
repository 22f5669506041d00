"""Bootstrap the database by creating all tables from SQLAlchemy metadata.

Uses psycopg2 (sync) for DDL and stamps the Alembic version so later
``alembic upgrade head`` runs are no-ops.

Usage:
    python -m scripts.bootstrap_db
    python -m scripts.bootstrap_db --drop  # drop all tables first
"""

from __future__ import annotations

import argparse
import logging

from sqlalchemy import create_engine, text

import statuspage.core.models  # noqa: F401 - registers all models with Base.metadata
from statuspage.core.config import get_settings
from statuspage.core.database import Base

logging.basicConfig(level=logging.INFO, format="%(levelname)s  %(message)s")
logger = logging.getLogger(__name__)

ALEMBIC_HEAD = "002"


def sync_database_url() -> str:
    """The configured URL with the asyncpg driver swapped for psycopg2."""
    url = get_settings().database_url or ""
    return url.replace("postgresql+asyncpg://", "postgresql+psycopg2://", 1)


def main(drop: bool = False) -> None:
    engine = create_engine(sync_database_url(), echo=False)

    with engine.begin() as conn:
        if drop:
            logger.info("Dropping all tables and types...")
            Base.metadata.drop_all(conn)

        logger.info("Creating all tables from SQLAlchemy metadata...")
        Base.metadata.create_all(conn)

        conn.execute(text("CREATE TABLE IF NOT EXISTS alembic_version (version_num VARCHAR(32) NOT NULL)"))
        conn.execute(text("DELETE FROM alembic_version"))
        conn.execute(text("INSERT INTO alembic_version (version_num) VALUES (:v)"), {"v": ALEMBIC_HEAD})

    engine.dispose()

    logger.info("Database bootstrapped: %d tables created", len(Base.metadata.tables))
    logger.info("Alembic version stamped to %s (latest)", ALEMBIC_HEAD)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Bootstrap the statuspage database")
    parser.add_argument("--drop", action="store_true", help="Drop all tables first")
    args = parser.parse_args()
    main(drop=args.drop)
