"""Write routing between the primary connection and a replication master."""

from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlcommand.commands import BaseCommand, BulkImportMode, Use
from sqlcommand.engine.driver import Driver
from sqlcommand.engine.state import ConnectionState
from sqlcommand.engine.transactions import TransactionTracker
from sqlcommand.logging import get_logger
from sqlcommand.query_builder.base import QueryBuilder


logger = get_logger(__name__)


@dataclass
class ConnectionSlot:
    """A named connection and its transaction depth."""

    name: str
    driver: Driver
    tracker: TransactionTracker

    @classmethod
    def open(cls, name: str, driver: Driver) -> "ConnectionSlot":
        driver.connect()
        return cls(name=name, driver=driver, tracker=TransactionTracker(driver, name))


class ReplicationRouter:
    """Routes commands to the primary or master connection slot.

    Reads go to primary until the master is opened. The first write opens
    the master lazily and replays the session onto it: the selected
    database, bulk import mode, and one real BEGIN when primary has an open
    transaction (the depth is mirrored as well). From then on every command
    runs on the master; the router never switches back.

    Args:
        primary: The always-open primary slot
        builder: Query builder for the session dialect
        state: Session state to replay onto the master
        master_factory: Creates the master driver; None when no master is
            configured, in which case everything runs on primary
    """

    def __init__(
        self,
        primary: ConnectionSlot,
        builder: QueryBuilder,
        state: ConnectionState,
        master_factory: Optional[Callable[[], Driver]] = None,
    ):
        self.primary = primary
        self.builder = builder
        self.state = state
        self.master_factory = master_factory
        self.master: Optional[ConnectionSlot] = None

    @property
    def active(self) -> ConnectionSlot:
        return self.master if self.master is not None else self.primary

    @property
    def slots(self) -> List[ConnectionSlot]:
        """Open slots, primary first."""
        return [self.primary] if self.master is None else [self.primary, self.master]

    def route(self, command: BaseCommand) -> ConnectionSlot:
        """Pick the slot a command runs on."""
        if command.is_write and self.master_factory is not None:
            return self.use_master()
        return self.active

    def use_master(self) -> ConnectionSlot:
        """Open the master slot if needed and return it.

        Raises:
            ExecutionError: If the master cannot be reached or the session
                cannot be replayed onto it
        """
        if self.master is not None:
            return self.master
        if self.master_factory is None:
            logger.debug("No master configured, staying on primary")
            return self.primary

        slot = ConnectionSlot.open("master", self.master_factory())
        try:
            replay: List[BaseCommand] = []
            if self.state.database:
                replay.append(Use(database=self.state.database))
            if self.state.bulk_import:
                replay.append(BulkImportMode(enabled=True))
            for command in replay:
                for statement in self.builder.build(command):
                    slot.driver.execute(statement).close()

            if self.primary.tracker.depth:
                slot.tracker.begin()
                slot.tracker.depth = self.primary.tracker.depth
        except Exception:
            slot.driver.close()
            raise

        self.master = slot
        logger.info(
            "Switched to master connection",
            extra={
                "db.dialect": self.builder.dialect,
                "database": self.state.database,
                "transaction.depth": slot.tracker.depth,
            },
        )
        return slot

    def begin(self) -> None:
        for slot in self.slots:
            slot.tracker.begin()

    def commit(self) -> None:
        for slot in self.slots:
            slot.tracker.commit()

    def rollback(self) -> None:
        """Roll back every open slot; the first failure is raised after all ran."""
        errors = []
        for slot in self.slots:
            try:
                slot.tracker.rollback()
            except Exception as exc:
                errors.append(exc)
        if errors:
            raise errors[0]

    @property
    def depth(self) -> int:
        return self.active.tracker.depth

    def close(self) -> None:
        errors = []
        for slot in reversed(self.slots):
            try:
                slot.driver.close()
            except Exception as exc:
                errors.append(exc)
        self.master = None
        if errors:
            raise errors[0]
