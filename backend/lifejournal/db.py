# lifejournal/db.py
import os
from psycopg_pool import ConnectionPool  # pip install "psycopg[binary,pool]"

# Empty conninfo: libpq settings come from the keyword args below.
# Opened by the app lifespan, so importing this module never connects.
pool = ConnectionPool(
    "",
    kwargs=dict(
        host=os.getenv("PGHOST", "postgres"),
        dbname=os.getenv("PGDATABASE", "postgres"),
        user=os.getenv("PGUSER", "lifejournal"),
        sslmode=os.getenv("PGSSLMODE", "prefer"),
        sslrootcert=os.getenv("PGSSLROOTCERT"),
        sslcert=os.getenv("PGSSLCERT"),
        sslkey=os.getenv("PGSSLKEY"),
        connect_timeout=5,
    ),
    max_size=int(os.getenv("DB_POOL_MAX", "10")),
    timeout=10,
    open=False,
)

def qrow(sql: str, params: tuple | None = None):
    """Run one statement and return its first row (tuple)."""
    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(sql, params or ())
        return cur.fetchone()
