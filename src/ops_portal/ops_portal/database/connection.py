from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    charset: str = "utf8mb4"

    @classmethod
    def from_dict(cls, data: dict) -> "DBConfig":
        return cls(
            host=str(data.get("host") or "localhost"),
            port=int(data.get("port") or 3306),
            user=str(data.get("user") or "root"),
            password=str(data.get("password") or ""),
            database=str(data["database"]),
            charset=str(data.get("charset") or "utf8mb4"),
        )

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Process-wide connection factory for the MySQL record store.

    A new short-lived connection is opened per store call; asking for an
    instance with a different config replaces the previous one.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self.config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None or cls._instance.config != config:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(**asdict(self.config))
