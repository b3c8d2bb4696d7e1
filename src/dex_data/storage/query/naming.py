"""Identifier case translation between API field names and store columns.

Field names are camelCase with a few upper-case acronyms kept intact
(``volumeUSD24h``, ``totalTVL``, ``imageURI``); the indexer stores the
same attributes as lower snake_case columns (``volume_usd_24h``).

The acronym table is explicit and passed in at construction; names that
contain no known acronym degrade to a plain case-boundary split, which
never raises but may yield a column the store does not have (that error
surfaces at execution time).
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any

DEFAULT_ACRONYMS = ("USD", "TVL", "URI", "API")


class IdentifierTranslator:
    """Bidirectional field <-> column name mapping.

    Invariants:
        - to_column is idempotent on lower_snake_case input
        - to_column(to_field(to_column(x))) == to_column(x)
        - to_field(to_column(f)) == f for camelCase fields whose acronyms
          are in the table
    """

    def __init__(self, acronyms: Iterable[str] = DEFAULT_ACRONYMS):
        # Longest first so an acronym never shadows a longer one sharing a prefix
        self.acronyms = tuple(sorted({a.upper() for a in acronyms}, key=len, reverse=True))
        self._normalized = {a: a.capitalize() for a in self.acronyms}
        self._restore = {a.lower(): a for a in self.acronyms}

        if self.acronyms:
            self._acronym_re = re.compile("|".join(map(re.escape, self.acronyms)))
            tokens = "|".join(map(re.escape, self._normalized.values()))
            self._acronym_digit_re = re.compile(rf"({tokens})(\d)")
        else:
            self._acronym_re = None
            self._acronym_digit_re = None

    def to_column(self, field: str) -> str:
        """Translate a field name to its column name.

        Order matters: acronyms are normalized before any boundary rule,
        otherwise the capital/digit rule would split ``USD24`` as ``US_D_24``.
        """
        name = field
        if self._acronym_re is not None:
            name = self._acronym_re.sub(lambda m: self._normalized[m.group(0)], name)
            name = self._acronym_digit_re.sub(r"\1_\2", name)
        name = re.sub(r"([A-Z])(\d)", r"\1_\2", name)
        name = re.sub(r"(\d)([A-Z])", r"\1_\2", name)
        name = re.sub(r"([a-z])([A-Z])", r"\1_\2", name)
        return name.lower()

    def to_field(self, column: str) -> str:
        """Translate a column name back to its field name."""
        head, *rest = column.split("_")
        parts = [head]
        for segment in rest:
            if not segment:
                continue
            acronym = self._restore.get(segment)
            if acronym is not None:
                parts.append(acronym)
            else:
                parts.append(segment[0].upper() + segment[1:])
        return "".join(parts)

    def row_to_fields(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """Return a new row keyed by field names."""
        return {self.to_field(column): value for column, value in row.items()}


_default = IdentifierTranslator()


def to_column(field: str) -> str:
    return _default.to_column(field)


def to_field(column: str) -> str:
    return _default.to_field(column)
