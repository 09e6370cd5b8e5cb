"""
Postings list data structures for the inverted index.
"""

from typing import List, Optional, Iterator
from dataclasses import dataclass, field
from operator import attrgetter


@dataclass
class PostingEntry:
    """
    Occurrences of one term in one document.

    Attributes:
        doc_id: Document identifier
        term_freq: Number of times the term appears in the document
        positions: Positions where the term appears, in collection order
    """
    doc_id: int
    term_freq: int
    positions: List[int] = field(default_factory=list)

    def __post_init__(self):
        if not self.positions:
            raise ValueError(f"Posting for document {self.doc_id} has no positions")
        if self.term_freq != len(self.positions):
            raise ValueError(
                f"Posting for document {self.doc_id}: term_freq={self.term_freq} "
                f"but {len(self.positions)} positions"
            )

    @classmethod
    def from_positions(cls, doc_id: int, positions: List[int]) -> 'PostingEntry':
        """Create a posting whose frequency is the number of positions."""
        return cls(doc_id=doc_id, term_freq=len(positions), positions=list(positions))

    def __lt__(self, other):
        """Compare by doc_id for sorting."""
        return self.doc_id < other.doc_id

    def sort_positions(self):
        """Sort positions ascending. Duplicate positions are kept."""
        self.positions.sort()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'doc_id': self.doc_id,
            'term_freq': self.term_freq,
            'positions': list(self.positions)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PostingEntry':
        """Create from dictionary."""
        return cls(
            doc_id=data['doc_id'],
            term_freq=data['term_freq'],
            positions=list(data['positions'])
        )


class PostingsList:
    """
    Postings list for a single term.

    Entries keep insertion order until sort() is called; afterwards they are
    ascending by doc_id.
    """

    def __init__(self, postings: Optional[List[PostingEntry]] = None):
        self.postings: List[PostingEntry] = list(postings) if postings else []

    def add(self, posting: PostingEntry):
        """Append a posting at the end of the list."""
        self.postings.append(posting)

    def sort(self):
        """
        Order postings by doc_id and the positions inside each posting.

        Both sorts are stable, so sorting an already sorted list is a no-op.
        """
        self.postings.sort(key=attrgetter('doc_id'))
        for posting in self.postings:
            posting.sort_positions()

    def index_of(self, doc_id: int) -> int:
        """Index of the posting for doc_id, or -1 if absent."""
        for i, posting in enumerate(self.postings):
            if posting.doc_id == doc_id:
                return i
        return -1

    def contains(self, doc_id: int) -> bool:
        return self.index_of(doc_id) != -1

    def get_posting(self, doc_id: int) -> Optional[PostingEntry]:
        """
        Get posting entry for a specific document.

        Args:
            doc_id: Document identifier

        Returns:
            PostingEntry if found, None otherwise
        """
        idx = self.index_of(doc_id)
        return self.postings[idx] if idx != -1 else None

    def get_doc_ids(self) -> List[int]:
        """Document ids in list order."""
        return [p.doc_id for p in self.postings]

    def get_term_frequency(self, doc_id: int) -> int:
        """Get term frequency in a specific document."""
        posting = self.get_posting(doc_id)
        return posting.term_freq if posting else 0

    def get_positions(self, doc_id: int) -> List[int]:
        """Get positions of term in a specific document."""
        posting = self.get_posting(doc_id)
        return list(posting.positions) if posting else []

    def document_frequency(self) -> int:
        """Get number of documents containing this term."""
        return len(self.postings)

    def total_term_frequency(self) -> int:
        """Get total occurrences of term across all documents."""
        return sum(p.term_freq for p in self.postings)

    def __len__(self) -> int:
        return len(self.postings)

    def __iter__(self) -> Iterator[PostingEntry]:
        return iter(self.postings)

    def __getitem__(self, i: int) -> PostingEntry:
        return self.postings[i]

    def __eq__(self, other):
        if not isinstance(other, PostingsList):
            return NotImplemented
        return self.postings == other.postings

    def __repr__(self):
        return f"PostingsList({self.postings!r})"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'postings': [p.to_dict() for p in self.postings],
            'df': self.document_frequency(),
            'total_tf': self.total_term_frequency()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PostingsList':
        """Create from dictionary."""
        return cls([PostingEntry.from_dict(p) for p in data['postings']])
