"""
invindex - positional in-memory inverted index.
"""

from .core import (
    Term,
    TermTuple,
    Document,
    PostingEntry,
    PostingsList,
    InvertedIndex,
    build_index
)
from .exceptions import (
    InvertedIndexError,
    DuplicateDocumentError,
    IndexPersistenceError,
    IndexIOError,
    IndexFormatError
)

__version__ = '1.0.0'

__all__ = [
    'Term',
    'TermTuple',
    'Document',
    'PostingEntry',
    'PostingsList',
    'InvertedIndex',
    'build_index',

    'InvertedIndexError',
    'DuplicateDocumentError',
    'IndexPersistenceError',
    'IndexIOError',
    'IndexFormatError',
]
