from __future__ import annotations

import logging
from typing import Callable, TypeVar

from tenacity import Retrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from ..core.constants import DEFAULT_TX_RETRY_ATTEMPTS, DEFAULT_TX_RETRY_MAX_WAIT, DEFAULT_TX_RETRY_MIN_WAIT
from .connection import DatabaseConnection
from .mysql_base import db_cursor, is_transient_error
from .unit_of_work import MySQLUnitOfWork, UnitOfWork

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionRunner:
    """Run a unit of work inside one database transaction.

    Each attempt opens a fresh connection and commits only when ``work``
    returns. Deadlocks, lock wait timeouts and dropped connections are retried
    with exponential backoff; any other exception (domain errors included)
    rolls back and propagates on the first attempt.
    """

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        attempts: int = DEFAULT_TX_RETRY_ATTEMPTS,
        min_wait: float = DEFAULT_TX_RETRY_MIN_WAIT,
        max_wait: float = DEFAULT_TX_RETRY_MAX_WAIT,
        uow_factory: Callable[..., UnitOfWork] = MySQLUnitOfWork,
    ):
        self._conn_factory = conn_factory
        self._attempts = max(int(attempts), 1)
        self._min_wait = float(min_wait)
        self._max_wait = float(max_wait)
        self._uow_factory = uow_factory

    def _retrying(self) -> Retrying:
        return Retrying(
            retry=retry_if_exception(is_transient_error),
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=self._min_wait, min=self._min_wait, max=self._max_wait),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def run(self, work: Callable[[UnitOfWork], T]) -> T:
        for attempt in self._retrying():
            with attempt:
                with db_cursor(self._conn_factory) as (_, cur):
                    return work(self._uow_factory(cur))
        raise RuntimeError("transaction retry loop exited without a result")
