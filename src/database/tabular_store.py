"""
===============================================================================
MISSION TELEMETRY REPLAY - Tabular Data Store
===============================================================================
Loads comma-separated telemetry tables (trajectory, antenna availability,
link budget) into immutable, ordered row sequences.  Row order is the time
series order: row ``i`` holds the sample for simulation index ``i``.

Parsing rules are deliberately minimal:
    - lines end at LF, CRLF or CR only; form feeds, vertical tabs and other
      Unicode line separators inside a field stay in that field;
    - each line is split on ',' with no quoting or escaping, so a field that
      itself contains a comma yields misaligned columns;
    - the first row is treated as a header and always discarded;
    - fields stay as text; consumers parse the columns they need.

Usage:
    from database.tabular_store import TabularDataStore

    store = TabularDataStore()
    antenna_table = store.load("data/antenna_availability.csv")
    antenna = antenna_table[index][1]

===============================================================================
"""

import logging
import re
from pathlib import Path
from typing import IO, List, Tuple, Union

from core.exceptions import TableLoadError

logger = logging.getLogger(__name__)

Row = Tuple[str, ...]
Table = Tuple[Row, ...]

DELIMITER = ','
LINE_BREAK = re.compile(r'\r\n|\r|\n')


class TabularDataStore:
    """Loader for header-prefixed, comma-separated telemetry tables.

    Parameters
    ----------
    delimiter : str, optional
        Field separator.  Defaults to ``','``.
    encoding : str, optional
        Text encoding used when ``load`` opens a path.

    Examples
    --------
    >>> store = TabularDataStore()
    >>> store.parse("time,antenna\\n0,DSS-14\\n1,DSS-14\\n")
    (('0', 'DSS-14'), ('1', 'DSS-14'))
    """

    def __init__(self, delimiter: str = DELIMITER, encoding: str = 'utf-8') -> None:
        self.delimiter = delimiter
        self.encoding = encoding

    # =========================================================================
    # Loading
    # =========================================================================

    def load(self, source: Union[str, Path, IO[str]]) -> Table:
        """Load a table from a file path or an open text stream.

        Parameters
        ----------
        source : str, Path or text stream
            Location of the table, or a stream already opened for reading.

        Returns
        -------
        Table
            Data rows in file order, header removed.  May be empty.

        Raises
        ------
        TableLoadError
            If the source is missing or cannot be read.
        """
        if hasattr(source, 'read'):
            name = getattr(source, 'name', '<stream>')
            try:
                text = source.read()
            except (OSError, ValueError) as exc:
                raise TableLoadError(f"Unable to read table stream {name}: {exc}") from exc
        else:
            path = Path(source)
            name = str(path)
            try:
                text = path.read_text(encoding=self.encoding)
            except (OSError, UnicodeDecodeError) as exc:
                raise TableLoadError(f"Unable to read table file {path}: {exc}") from exc

        table = self.parse(text)
        if not table:
            logger.warning("Table %s has no data rows after header removal", name)
        else:
            logger.info("Loaded %d rows from %s", len(table), name)
        return table

    def parse(self, text: str) -> Table:
        """Split a text blob into rows of fields and drop the header row.

        Parameters
        ----------
        text : str
            Newline-separated lines of delimiter-separated fields.

        Returns
        -------
        Table
            Data rows in order.  Empty if ``text`` holds a header only, or
            nothing at all.
        """
        lines = LINE_BREAK.split(text)
        if lines[-1] == '':
            lines.pop()
        rows: List[Row] = [tuple(line.split(self.delimiter)) for line in lines]
        # The first row of headers is removed
        return tuple(rows[1:])

    def __repr__(self) -> str:
        return f"TabularDataStore(delimiter={self.delimiter!r})"
