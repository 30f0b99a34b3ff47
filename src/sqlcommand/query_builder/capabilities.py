"""Per-dialect capability tables.

A capability table is a static, read-only description of what a dialect
supports. The shared statement generators consult it instead of branching
on the dialect name; dialect builders only override generator methods
where behaviour genuinely diverges.
"""

from typing import Dict, FrozenSet, List, Optional, Tuple

from pydantic import ConfigDict, Field

from sqlcommand.constants.sql import (
    AutoIncrementStyle,
    ColumnType,
    CommentStyle,
    IndexStatementStyle,
    KeyType,
    LimitSyntax,
    TemporaryTableStyle,
)
from sqlcommand.types.base import SQLCommandBaseModel


class DialectCapabilities(SQLCommandBaseModel):
    """What a target dialect can express natively.

    Type templates may reference ``{length}`` (string/binary) and
    ``{precision}``/``{scale}`` (decimal).
    """
    model_config = ConfigDict(frozen=True)

    name: str
    identifier_quote: Tuple[str, str] = ('"', '"')
    quoted_spans: Tuple[Tuple[str, str], ...] = (("'", "'"), ('"', '"'))

    # Row limiting
    limit_syntax: LimitSyntax = LimitSyntax.LIMIT_OFFSET
    update_limit: bool = False

    # INSERT
    multi_row_insert: bool = True
    max_insert_rows: Optional[int] = None
    max_parameters: Optional[int] = None
    update_default_keyword: bool = True

    # Table creation
    ctas: bool = True
    temporary_style: TemporaryTableStyle = TemporaryTableStyle.KEYWORD
    table_charset: bool = False
    inline_keys: FrozenSet[KeyType] = frozenset({KeyType.PRIMARY, KeyType.FOREIGN})
    separate_keys: FrozenSet[KeyType] = frozenset({KeyType.PRIMARY, KeyType.UNIQUE, KeyType.KEY, KeyType.FOREIGN})
    index_statement_style: IndexStatementStyle = IndexStatementStyle.CREATE_INDEX
    drop_index_on_table: bool = False
    max_identifier_length: int = 63

    # ALTER TABLE
    add_column_keyword: str = "ADD COLUMN"
    add_column_position: bool = False
    native_drop_column: bool = True

    # TRUNCATE / DROP
    truncate_statement: bool = True
    truncate_multiple: bool = False
    drop_multiple_tables: bool = True
    drop_temporary_keyword: bool = False

    # Column types
    integer_types: Dict[int, str]
    native_unsigned: bool = False
    integer_overflow_type: Optional[str] = None
    float_types: Dict[int, str]
    decimal_type: str = "DECIMAL({precision},{scale})"
    max_decimal_precision: int = 38
    max_decimal_scale: int = 38
    string_types: Dict[int, str]
    fixed_string_type: Optional[str] = None
    max_string_length: int = 65535
    binary_types: Dict[int, str]
    fixed_binary_type: Optional[str] = None
    max_binary_length: int = 65535
    max_fixed_length: int = 255
    temporal_types: Dict[ColumnType, str]
    boolean_type: str
    boolean_literals: Tuple[str, str] = ("1", "0")

    # Column options
    auto_increment_style: AutoIncrementStyle
    serial_types: Dict[int, str] = Field(default_factory=dict)
    comment_style: CommentStyle = CommentStyle.NONE
    inline_references: bool = True
    insert_id_requires_column: bool = False
    insert_id_sql: str = ""

    # Session statements
    begin_statement: str = "BEGIN"
    commit_statement: str = "COMMIT"
    rollback_statement: str = "ROLLBACK"
    set_keyword: str = "SET"
    set_parameters: bool = True
    use_statement: Optional[str] = "USE {name}"
    bulk_import_on: List[str] = Field(default_factory=list)
    bulk_import_off: List[str] = Field(default_factory=list)
    backslash_escapes: bool = False

    def supports_inline_key(self, key_type: KeyType) -> bool:
        return key_type in self.inline_keys

    def supports_separate_key(self, key_type: KeyType) -> bool:
        return key_type in self.separate_keys

    def insert_batch_size(self, columns: int) -> int:
        """Rows per INSERT statement for a row of ``columns`` bound values."""
        if not self.multi_row_insert:
            return 1
        size = self.max_insert_rows or 0
        if self.max_parameters and columns:
            by_parameters = max(1, self.max_parameters // columns)
            size = min(size, by_parameters) if size else by_parameters
        return size or 0
