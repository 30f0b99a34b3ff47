from dataclasses import dataclass
from typing import Optional


@dataclass
class ConnectionState:
    """Session state that must survive a switch to the master connection.

    Attributes:
        database: Database selected by the last USE
        large_results: Stream rows instead of buffering them
        bulk_import: Whether BULK IMPORT MODE is enabled
        last_insert_table: Table of the last INSERT
        last_insert_column: AUTO INCREMENT column named by the last INSERT
    """

    database: Optional[str] = None
    large_results: bool = False
    bulk_import: bool = False
    last_insert_table: Optional[str] = None
    last_insert_column: Optional[str] = None
