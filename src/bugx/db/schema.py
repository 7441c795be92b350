"""
Schema setup for the application database.

Every statement is idempotent, so setup can run on every deploy.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol


logger = logging.getLogger(__name__)

TEST_USER_EMAIL = "test@test.com"
# bcrypt hash of the test user's password
TEST_USER_PASSWORD_HASH = "$2b$10$92IXUNpkjO0rOQ5byMi.Ye4oKoEa3Ro9llC/.og/at2.uheWG/igi"

SCHEMA_STATEMENTS: List[str] = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id SERIAL PRIMARY KEY,
        name VARCHAR(100),
        email VARCHAR(255) NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TIMESTAMP NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMP NOT NULL DEFAULT NOW(),
        deleted_at TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS activity_logs (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL REFERENCES users(id),
        action TEXT NOT NULL,
        timestamp TIMESTAMP NOT NULL DEFAULT NOW(),
        ip_address VARCHAR(45),
        metadata TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_users_email ON users(email)",
    "CREATE INDEX IF NOT EXISTS idx_activity_logs_user_id ON activity_logs(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_activity_logs_timestamp ON activity_logs(timestamp)",
]

SEED_STATEMENTS: List[str] = [
    f"""
    INSERT INTO users (name, email, password_hash)
    VALUES ('Test User', '{TEST_USER_EMAIL}', '{TEST_USER_PASSWORD_HASH}')
    ON CONFLICT (email) DO NOTHING
    """,
]

USER_COUNT_QUERY = "SELECT COUNT(*) AS count FROM users"
TEST_USER_QUERY = f"SELECT email, name FROM users WHERE email = '{TEST_USER_EMAIL}'"


class SQLExecutor(Protocol):
    """What schema setup needs from a database connection."""

    async def execute(self, statement: str) -> Any: ...

    async def fetchrow(self, query: str) -> Optional[Dict[str, Any]]: ...


async def apply_schema(executor: SQLExecutor) -> None:
    """Create tables and indexes, then seed the test user."""
    for statement in SCHEMA_STATEMENTS + SEED_STATEMENTS:
        await executor.execute(statement)
    logger.info("Database schema applied")


async def verify_schema(executor: SQLExecutor) -> Dict[str, Any]:
    """Return the user count and the seeded test user."""
    count_row = await executor.fetchrow(USER_COUNT_QUERY)
    test_user = await executor.fetchrow(TEST_USER_QUERY)
    return {
        "user_count": dict(count_row) if count_row is not None else None,
        "test_user": dict(test_user) if test_user is not None else None,
    }
