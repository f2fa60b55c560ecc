from typing import Protocol

from databases import Database


CREATE_STORAGE_TABLE = """
CREATE TABLE IF NOT EXISTS Storage (key VARCHAR(256) PRIMARY KEY, value TEXT NOT NULL)
"""


GET_VALUE = "SELECT value FROM Storage WHERE key = :key"


SET_VALUE = """
INSERT INTO Storage(key, value) VALUES (:key, :value)
ON CONFLICT(key) DO UPDATE SET value = excluded.value
"""


class Storage(Protocol):
    """A string keyed slot store, overwritten wholesale on every write."""

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...


class SqliteStorage:
    """Local key-value storage in a single SQLite table."""

    def __init__(self, db: Database | str) -> None:
        self.db = Database(db) if isinstance(db, str) else db

    async def connect(self) -> None:
        await self.db.connect()
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            query=CREATE_STORAGE_TABLE
        )

    async def disconnect(self) -> None:
        await self.db.disconnect()

    async def get(self, key: str) -> str | None:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_VALUE, values={"key": key}
        )
        if result is None:
            return None
        return result["value"]

    async def set(self, key: str, value: str) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            SET_VALUE, values={"key": key, "value": value}
        )
