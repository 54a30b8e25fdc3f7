from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core.constants import DEFAULT_TX_RETRY_ATTEMPTS, DEFAULT_TX_RETRY_MAX_WAIT, DEFAULT_TX_RETRY_MIN_WAIT
from .database.connection import DBConfig, DatabaseConnection
from .database.transaction import TransactionRunner
from .lifecycle.orchestrator import LifecycleOrchestrator, TransactionalRunner


@dataclass(frozen=True)
class Container:
    tx: TransactionalRunner
    orchestrator: LifecycleOrchestrator
    conn: Optional[DatabaseConnection] = None


def build_container(
    *,
    db_config: dict,
    retry_attempts: int = DEFAULT_TX_RETRY_ATTEMPTS,
    retry_min_wait: float = DEFAULT_TX_RETRY_MIN_WAIT,
    retry_max_wait: float = DEFAULT_TX_RETRY_MAX_WAIT,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    tx = TransactionRunner(conn, attempts=retry_attempts, min_wait=retry_min_wait, max_wait=retry_max_wait)
    orchestrator = LifecycleOrchestrator(tx)

    return Container(tx=tx, orchestrator=orchestrator, conn=conn)
