"""Subquery token expansion.

A clause containing ``{N}`` is rewritten to the parenthesised SQL of the
Nth entry of the command's SUBQUERIES list. Each entry is compiled as a
SELECT with ``subquery=True`` against its own arguments, and its
parameters are spliced in at the position of the token.
"""

from typing import TYPE_CHECKING, Callable, List, Sequence, Set

from sqlcommand.common.exceptions import ErrorCode, validation_error
from sqlcommand.logging import get_logger
from sqlcommand.query_builder.plan import CompileContext, Parameter, Statement

if TYPE_CHECKING:
    from sqlcommand.commands.dml import Select


logger = get_logger(__name__)


class SubqueryProcessor:
    """Expands ``{N}`` tokens for one command.

    Args:
        compile_select: Compiles a SELECT into a single statement
        subqueries: The command's SUBQUERIES entries
        context: Context of the enclosing compilation
        parameters: Parameter buffer of the enclosing statement; expanded
            subquery parameters are appended to it
    """

    def __init__(
        self,
        compile_select: Callable[["Select", CompileContext], Statement],
        subqueries: Sequence["Select"],
        context: CompileContext,
        parameters: List[Parameter],
    ):
        self._compile_select = compile_select
        self._subqueries = list(subqueries)
        self._context = context.nested()
        self._parameters = parameters
        self._used: Set[int] = set()

    def expand(self, index: int) -> str:
        """Compile subquery ``index`` and return it parenthesised.

        Raises:
            ValidationError: If there is no subquery at ``index``
        """
        if index >= len(self._subqueries):
            raise validation_error(
                f"subquery token {{{index}}} has no matching SUBQUERIES entry "
                f"({len(self._subqueries)} given)",
                field="SUBQUERIES",
                error_code=ErrorCode.ARGUMENT_MISMATCH,
            )
        statement = self._compile_select(self._subqueries[index], self._context)
        self._parameters.extend(statement.parameters)
        self._used.add(index)
        return f"({statement.sql})"

    def finish(self) -> None:
        """Log SUBQUERIES entries that no token referenced."""
        unused = [i for i in range(len(self._subqueries)) if i not in self._used]
        if unused:
            logger.debug(
                "Unreferenced subqueries ignored",
                extra={"subquery.indexes": unused},
            )
