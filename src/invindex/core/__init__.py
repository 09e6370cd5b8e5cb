"""
Core inverted index implementation.
"""

from .document import Term, TermTuple, Document
from .postings import PostingEntry, PostingsList
from .codec import IndexCodec, VariableByteEncoder
from .inverted_index import InvertedIndex, build_index

__all__ = [
    'Term',
    'TermTuple',
    'Document',
    'PostingEntry',
    'PostingsList',
    'IndexCodec',
    'VariableByteEncoder',
    'InvertedIndex',
    'build_index',
]
