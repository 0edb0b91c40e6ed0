from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict

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
    def from_mapping(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "hr_records")),
        )


class DatabaseConnection:
    """Opens one short-lived mysql-connector connection per unit of work.

    Repositories hold a factory and call ``connect()`` inside ``db_cursor``;
    ``shared()`` hands out one factory per distinct config.
    """

    _shared: ClassVar[Dict[DBConfig, "DatabaseConnection"]] = {}

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def shared(cls, config: DBConfig) -> "DatabaseConnection":
        if config not in cls._shared:
            cls._shared[config] = cls(config)
        return cls._shared[config]

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self, *, with_database: bool = True):
        c = self._config
        params = {
            "host": c.host,
            "port": c.port,
            "user": c.user,
            "password": c.password,
            "charset": c.charset,
            "use_pure": True,
        }
        if with_database:
            params["database"] = c.database
        return mysql.connector.connect(**params)
