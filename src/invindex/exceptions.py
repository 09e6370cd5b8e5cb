"""
Exception hierarchy for the inverted index.
"""


class InvertedIndexError(Exception):
    """Base class for all index errors."""


class DuplicateDocumentError(InvertedIndexError, ValueError):
    """Raised when a document id is added to the index twice."""

    def __init__(self, doc_id: int):
        super().__init__(f"Document {doc_id} is already indexed")
        self.doc_id = doc_id


class IndexPersistenceError(InvertedIndexError):
    """Base class for save/load failures."""


class IndexIOError(IndexPersistenceError):
    """The underlying file or stream could not be opened, written or read."""


class IndexFormatError(IndexPersistenceError):
    """The payload is malformed, truncated or written by an unknown version."""
