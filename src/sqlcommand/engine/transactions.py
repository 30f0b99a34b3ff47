"""Nested transaction emulation over a single connection."""

from sqlcommand.engine.driver import Driver
from sqlcommand.logging import get_logger


logger = get_logger(__name__)


class TransactionTracker:
    """Tracks transaction depth for one connection.

    Only the outermost begin and commit reach the server; inner levels
    only move the counter. Rollback is not nestable: it always rolls back
    the whole transaction and resets the depth.

    Args:
        driver: Connection the real statements run on
        name: Slot name used in log records
    """

    def __init__(self, driver: Driver, name: str = "primary"):
        self.driver = driver
        self.name = name
        self.depth = 0

    @property
    def active(self) -> bool:
        return self.depth > 0

    def begin(self) -> None:
        """Open a transaction level; depth 0 to 1 issues a real BEGIN."""
        if self.depth == 0:
            self.driver.begin()
        self.depth += 1
        logger.debug(
            "Transaction begin",
            extra={"db.route": self.name, "transaction.depth": self.depth},
        )

    def commit(self) -> None:
        """Close a transaction level; depth 1 to 0 issues a real COMMIT.

        The depth is left unchanged if the COMMIT fails.
        """
        if self.depth == 0:
            logger.warning(
                "Commit without an open transaction ignored",
                extra={"db.route": self.name},
            )
            return
        if self.depth == 1:
            self.driver.commit()
        self.depth -= 1
        logger.debug(
            "Transaction commit",
            extra={"db.route": self.name, "transaction.depth": self.depth},
        )

    def rollback(self) -> None:
        """Roll back the whole transaction regardless of depth."""
        try:
            self.driver.rollback()
        finally:
            self.depth = 0
        logger.debug("Transaction rollback", extra={"db.route": self.name})

    def commit_all(self) -> None:
        """Commit every open level with a single real COMMIT."""
        if self.depth == 0:
            return
        self.depth = 1
        self.commit()
