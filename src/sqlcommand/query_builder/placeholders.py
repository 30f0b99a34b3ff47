"""Placeholder scanning and argument consumption.

Two token kinds are recognised in clause strings, and only outside quoted
strings and quoted identifiers:

- ``?``: consumes the next positional argument
- ``{N}``: expands to the Nth subquery (zero-based)

Which delimiters open a quoted span depends on the dialect. ANSI SQL only
quotes with ``'...'`` and ``"..."``; MySQL adds ``` `...` ```, MSSQL adds
``[...]`` and SQLite accepts both. On PostgreSQL ``ARRAY[?]`` is an array
constructor, so brackets must not hide the ``?`` there.
"""

import re
from typing import Any, Callable, List, Optional, Sequence, Tuple

from sqlcommand.common.exceptions import ErrorCode, validation_error


_SUBQUERY_TOKEN = re.compile(r"\{(\d+)\}")

ANSI_QUOTES: Tuple[Tuple[str, str], ...] = (("'", "'"), ('"', '"'))


def substitute(
    text: str,
    on_placeholder: Optional[Callable[[], str]] = None,
    on_subquery: Optional[Callable[[int], str]] = None,
    quotes: Sequence[Tuple[str, str]] = ANSI_QUOTES,
) -> str:
    """Replace placeholder tokens outside quotes, left to right.

    Callbacks are invoked in textual order, so any parameters they collect
    line up with the ``?`` markers of the returned text.

    Args:
        text: Clause text
        on_placeholder: Returns the replacement for a ``?``; ``?`` is kept
            verbatim when omitted
        on_subquery: Returns the replacement for ``{N}``; the token is kept
            verbatim when omitted
        quotes: ``(opening, closing)`` pairs delimiting quoted spans of the
            target dialect

    Returns:
        The substituted text
    """
    closing_for = dict(quotes)
    out: List[str] = []
    i = 0
    length = len(text)
    while i < length:
        char = text[i]

        if char in closing_for:
            closing = closing_for[char]
            j = i + 1
            while j < length:
                if text[j] == "\\" and char in ("'", '"') and j + 1 < length:
                    j += 2
                    continue
                if text[j] == closing:
                    # doubled closer is an escaped closer
                    if j + 1 < length and text[j + 1] == closing:
                        j += 2
                        continue
                    break
                j += 1
            out.append(text[i:j + 1])
            i = j + 1
            continue

        if char == "?" and on_placeholder is not None:
            out.append(on_placeholder())
            i += 1
            continue

        if char == "{" and on_subquery is not None:
            match = _SUBQUERY_TOKEN.match(text, i)
            if match:
                out.append(on_subquery(int(match.group(1))))
                i = match.end()
                continue

        out.append(char)
        i += 1

    return "".join(out)


def count_placeholders(text: Optional[str], quotes: Sequence[Tuple[str, str]] = ANSI_QUOTES) -> int:
    """Number of ``?`` tokens outside quotes."""
    if not text:
        return 0
    counter = [0]

    def _count() -> str:
        counter[0] += 1
        return "?"

    substitute(text, on_placeholder=_count, quotes=quotes)
    return counter[0]


class ArgumentList:
    """Positional arguments consumed clause by clause.

    Example:
        >>> args = ArgumentList(["users", 5], command="SELECT")
        >>> args.take("FROM")
        'users'
        >>> args.take("WHERE")
        5
        >>> args.ensure_consumed()
    """

    def __init__(self, values: Sequence[Any], command: str):
        self._values = list(values)
        self._position = 0
        self.command = command

    @property
    def consumed(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._values) - self._position

    def take(self, clause: str) -> Any:
        """Consume the next argument for a ``?`` in ``clause``.

        Raises:
            ValidationError: If no argument is left
        """
        if self._position >= len(self._values):
            raise validation_error(
                f"{self.command}: not enough arguments for the placeholders in {clause} "
                f"({len(self._values)} given)",
                field=clause,
                error_code=ErrorCode.ARGUMENT_MISMATCH,
            )
        value = self._values[self._position]
        self._position += 1
        return value

    def ensure_consumed(self) -> None:
        """Raise if arguments are left over after every clause was compiled."""
        if self.remaining:
            raise validation_error(
                f"{self.command}: {len(self._values)} arguments given but only "
                f"{self._position} placeholders to bind",
                error_code=ErrorCode.ARGUMENT_MISMATCH,
            )
