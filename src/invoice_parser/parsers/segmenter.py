"""Reassembly of logical lines from PDF-extracted text.

PDF text extraction regularly breaks a single transaction across
physical lines (date on one line, the rest of the description and the
amount on the next). LineSegmenter glues those pieces back together.
"""

from enum import Enum
from typing import Callable, Iterator

LinePredicate = Callable[[str], bool]


def _never(line: str) -> bool:
    return False


class SegmenterState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"


class LineSegmenter:
    """Two-state machine turning physical lines into logical lines.

    In IDLE, an anchor line (e.g. one starting with a date) opens a
    record and moves to ACCUMULATING; any other line is emitted on its
    own so strategies can still see headers and noise. In ACCUMULATING,
    non-anchor lines are appended to the pending record. The record is
    flushed when:
        - another anchor line starts a new record
        - a boundary line (section header) is seen; the boundary itself
          is then emitted on its own
        - the line just added completes the record (e.g. it ends with
          an amount)
        - input ends

    The text is consumed once, forward-only.

    Example:
        >>> segmenter = LineSegmenter(is_anchor=lambda l: l[:2].isdigit())
        >>> list(segmenter.segment("15/03 UBER\\n*TRIP 45,90"))
        ['15/03 UBER *TRIP 45,90']
    """

    def __init__(
        self,
        is_anchor: LinePredicate,
        is_boundary: LinePredicate | None = None,
        is_complete: LinePredicate | None = None,
    ):
        """Initialize the segmenter.

        Args:
            is_anchor: True when a line starts a new record
            is_boundary: True when a line is a section header
            is_complete: True when the line just added closes the record
        """
        self.is_anchor = is_anchor
        self.is_boundary = is_boundary or _never
        self.is_complete = is_complete or _never

    def segment(self, text: str) -> Iterator[str]:
        """Yield logical lines from raw multi-line text.

        Blank lines are skipped, physical lines are trimmed, and the parts
        of a record are joined with a single space.
        """
        state = SegmenterState.IDLE
        pending: list[str] = []

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line:
                continue

            if self.is_boundary(line):
                if pending:
                    yield " ".join(pending)
                    pending = []
                state = SegmenterState.IDLE
                yield line
                continue

            if self.is_anchor(line):
                if pending:
                    yield " ".join(pending)
                pending = [line]
                state = SegmenterState.ACCUMULATING
            elif state is SegmenterState.ACCUMULATING:
                pending.append(line)
            else:
                yield line
                continue

            if self.is_complete(line):
                yield " ".join(pending)
                pending = []
                state = SegmenterState.IDLE

        if pending:
            yield " ".join(pending)
