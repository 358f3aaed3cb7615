from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Union

from legacy_migrator.models.portable_text import ColumnBreak, ConversionResult, Node
from legacy_migrator.parsers.portable_schema import KeyGenerator, two_column_line

Section = Union[ConversionResult, Sequence[Node]]


def is_two_column(nodes: Sequence[Node]) -> bool:
    return any(isinstance(n, ColumnBreak) for n in nodes)


def merge_sections(sections: Sequence[Section], *, new_key: Optional[Callable[[], str]] = None) -> List[Node]:
    """
    Flatten separately converted sections into one node list.

    A section holding a column break is laid out in two columns.  A two-column
    line marks its boundary, but only where it meets single-column content:
    before it when any single-column section comes earlier in the document,
    after it when any comes later.  Nothing is added at the very start or end.
    """
    key = new_key or KeyGenerator()
    flat = [list(s.nodes) if isinstance(s, ConversionResult) else list(s) for s in sections]
    two_column = [is_two_column(nodes) for nodes in flat]

    merged: List[Node] = []
    pending_end = False
    for i, nodes in enumerate(flat):
        if pending_end and not two_column[i]:
            merged.append(two_column_line(key=key()))
        pending_end = False
        if two_column[i]:
            if not all(two_column[:i]):
                merged.append(two_column_line(key=key()))
            pending_end = not all(two_column[i + 1:])
        merged.extend(nodes)
    return merged
