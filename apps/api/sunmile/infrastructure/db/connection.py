import os
from typing import Optional
from urllib.parse import quote

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool


def _conninfo_from_env() -> Optional[str]:
    url = os.environ.get("DATABASE_URL")
    if url:
        return url
    user = os.environ.get("DB_USERNAME")
    if not user:
        return None
    password = os.environ.get("DB_PASSWORD", "")
    host = os.environ.get("DB_HOST", "localhost")
    port = os.environ.get("DB_PORT", "5432")
    name = os.environ.get("DB_NAME", "sunmile")
    credentials = quote(user, safe="")
    if password:
        credentials += ":" + quote(password, safe="")
    return f"postgresql://{credentials}@{host}:{port}/{name}"


DATABASE_URL = _conninfo_from_env()

pool: Optional[ConnectionPool] = None


def init_pool() -> None:
    global pool
    if pool is not None:
        return
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL (or DB_USERNAME/DB_HOST/DB_NAME) is not set")

    pool = ConnectionPool(
        conninfo=DATABASE_URL,
        min_size=1,
        max_size=5,
        max_idle=5,
        timeout=10,
        # Dict rows keep the row mappers simple.
        kwargs={"row_factory": dict_row},
    )


def close_pool() -> None:
    global pool
    if pool is not None:
        pool.close()
        pool = None


def get_pool() -> ConnectionPool:
    if pool is None:
        raise RuntimeError("Database pool is not initialized")
    return pool
