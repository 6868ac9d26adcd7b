"""Element-set text parsing.

Splits raw three-line element-set text (name line followed by the two
fixed-format NORAD element lines) into immutable records. The parser is
deliberately permissive: it never validates the element lines, it only
groups non-blank lines into triples. An unusable element line surfaces
later, when the propagation model refuses to initialize from it.

References:
    - Kelso, T.S. "CelesTrak TLE Format Documentation"
      https://celestrak.org/columns/v04n03/
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

LINES_PER_RECORD = 3
"""Name line + element line 1 + element line 2."""


@dataclass(frozen=True, slots=True)
class ElementSetRecord:
    """One trackable object's element set, as read from the source text.

    Attributes:
        name: Display label from the name line (free text, may repeat).
        line1: Element line 1, passed through to the propagation model.
        line2: Element line 2, passed through to the propagation model.
        index: 0-based position of this triple in the parsed source.
    """

    name: str
    line1: str
    line2: str
    index: int

    @staticmethod
    def parse_batch(text: str) -> list[ElementSetRecord]:
        """Parse multi-record text. See :func:`parse_element_sets`."""
        return parse_element_sets(text)

    @property
    def norad_id(self) -> Optional[int]:
        """Catalog number from line 1, or ``None`` if it can't be read."""
        field = self.line1[2:7].strip()
        return int(field) if field.isdigit() else None

    def checksum_ok(self) -> bool:
        """Check the modulo-10 checksum of both element lines.

        Returns ``False`` for lines too short to carry a checksum digit.
        """
        return _checksum_matches(self.line1) and _checksum_matches(self.line2)

    def to_text(self) -> str:
        """Return the record as three newline-joined lines."""
        return "\n".join((self.name, self.line1, self.line2))

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "name": self.name,
            "norad_id": self.norad_id,
            "line1": self.line1,
            "line2": self.line2,
        }


def parse_element_sets(text: str) -> list[ElementSetRecord]:
    """Parse raw element-set text into records.

    Lines are stripped and blank lines discarded; the remaining lines are
    grouped into consecutive (name, line1, line2) triples in source order.
    A trailing group of fewer than three lines is dropped.

    Args:
        text: Raw text with any line endings.

    Returns:
        Records in source order, ``index`` numbered from 0.
    """
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]

    records: list[ElementSetRecord] = []
    for start in range(0, len(lines) - LINES_PER_RECORD + 1, LINES_PER_RECORD):
        name, line1, line2 = lines[start:start + LINES_PER_RECORD]
        records.append(
            ElementSetRecord(
                name=name,
                line1=line1,
                line2=line2,
                index=start // LINES_PER_RECORD,
            )
        )

    return records


def format_element_sets(records: Iterable[ElementSetRecord]) -> str:
    """Join records back into element-set text.

    Re-parsing the result reproduces the same records, provided their
    indices were 0..n-1 in order.
    """
    return "".join(f"{record.to_text()}\n" for record in records)


# ── Private helpers ──


def _checksum_matches(line: str) -> bool:
    """Verify a TLE line's modulo-10 checksum.

    Digits count at face value, ``-`` counts as 1, everything else as 0.
    """
    if len(line) < 69 or not line[68].isdigit():
        return False

    total = 0
    for ch in line[:68]:
        if ch.isdigit():
            total += int(ch)
        elif ch == "-":
            total += 1

    return total % 10 == int(line[68])
