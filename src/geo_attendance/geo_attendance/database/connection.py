from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling
from mysql.connector.constants import ClientFlag

logger = logging.getLogger(__name__)

POOL_NAME = "geo_attendance"


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 10
    pool_size: int = 5

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config.get("password") or ""),
            database=str(db_config["database"]),
            connect_timeout=int(db_config.get("connect_timeout", 10)),
            pool_size=int(db_config.get("pool_size", 5)),
        )

    def connect_args(self, *, with_database: bool = True) -> dict:
        args = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "connection_timeout": self.connect_timeout,
            # rowcount counts matched rows, not changed ones
            "client_flags": [ClientFlag.FOUND_ROWS],
        }
        if with_database:
            args["database"] = self.database
        return args


class DatabaseConnection:
    """Process-wide connection factory.

    Each operation borrows a connection and closes it when done; with a
    pool_size above zero, closing hands it back to a mysql-connector pool
    that is created on first use.
    """

    _instance: Optional["DatabaseConnection"] = None
    _instance_lock = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._pool_lock = threading.Lock()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = DatabaseConnection(config)
            return cls._instance

    @property
    def config(self) -> DBConfig:
        return self._config

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._pool_lock:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=POOL_NAME,
                    pool_size=self._config.pool_size,
                    **self._config.connect_args(),
                )
                logger.info("mysql pool ready (size=%s)", self._config.pool_size)
            return self._pool

    def connect(self):
        if self._config.pool_size <= 0:
            return mysql.connector.connect(**self._config.connect_args())
        return self._get_pool().get_connection()
