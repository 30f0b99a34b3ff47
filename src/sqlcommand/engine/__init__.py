"""Command execution.

The engine turns commands into executed statement plans:

- ``CommandDispatcher`` parses, routes, compiles and runs a command
- ``ReplicationRouter`` picks the primary or master connection slot
- ``TransactionTracker`` emulates nested transactions per connection
- ``SQLAlchemyDriver`` runs statements on one SQLAlchemy connection
- ``Cursor`` post-processes and yields the rows of the last statement
- ``DatabaseSession`` ties it all together
"""

from sqlcommand.engine.cursor import Cursor
from sqlcommand.engine.dispatcher import CommandDispatcher
from sqlcommand.engine.driver import Driver, ResultHandle
from sqlcommand.engine.replication import ConnectionSlot, ReplicationRouter
from sqlcommand.engine.session import DatabaseSession
from sqlcommand.engine.sqlalchemy_driver import SQLAlchemyDriver, SQLAlchemyResult
from sqlcommand.engine.state import ConnectionState
from sqlcommand.engine.transactions import TransactionTracker

__all__ = [
    "CommandDispatcher",
    "ConnectionSlot",
    "ConnectionState",
    "Cursor",
    "DatabaseSession",
    "Driver",
    "ReplicationRouter",
    "ResultHandle",
    "SQLAlchemyDriver",
    "SQLAlchemyResult",
    "TransactionTracker",
]
