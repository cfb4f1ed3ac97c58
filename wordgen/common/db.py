from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Iterator
import os

import psycopg
from psycopg import Connection
from dotenv import load_dotenv

load_dotenv()


def conninfo() -> str:
    if url := os.getenv("DATABASE_URL"):
        return url

    user = os.environ["POSTGRES_USER"]
    password = os.environ["POSTGRES_PASSWORD"]
    db = os.environ["POSTGRES_DB"]
    host = os.environ.get("POSTGRES_HOST", "localhost")
    port = os.environ.get("POSTGRES_PORT", "5432")

    return f"postgresql://{user}:{password}@{host}:{port}/{db}"


@asynccontextmanager
async def get_conn_async() -> AsyncIterator[psycopg.AsyncConnection]:
    conn = await psycopg.AsyncConnection.connect(conninfo())
    try:
        yield conn
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise
    finally:
        await conn.close()


@contextmanager
def get_conn() -> Iterator[Connection]:
    """Open a connection that commits on success and rolls back on error."""
    conn = psycopg.Connection.connect(conninfo())
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
