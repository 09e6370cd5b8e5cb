"""
Value types exchanged between a document producer and the index.
"""

from dataclasses import dataclass, field
from typing import Hashable, List


@dataclass(frozen=True, order=True)
class Term:
    """
    A normalized token used as a dictionary key.

    Equality, hashing and ordering are structural over ``content``, so two
    Term objects built from the same text are the same dictionary entry.
    """
    content: str

    def __str__(self) -> str:
        return self.content


@dataclass(frozen=True)
class TermTuple:
    """One occurrence of a term at a zero-based position in a document."""
    term: Hashable
    position: int


@dataclass
class Document:
    """
    A parsed document ready for indexing.

    Attributes:
        doc_id: Unique integer identifier
        path: Path or other identifier of the source
        tuples: Term occurrences in document order
    """
    doc_id: int
    path: str
    tuples: List[TermTuple] = field(default_factory=list)

    def __len__(self) -> int:
        """Number of term occurrences."""
        return len(self.tuples)
