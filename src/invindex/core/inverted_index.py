"""
Core inverted index data structure.
"""

from typing import Dict, List, Optional, Set, Hashable, Union, BinaryIO
from collections import defaultdict
from pathlib import Path
import logging

from .codec import IndexCodec
from .document import Document
from .postings import PostingEntry, PostingsList
from ..exceptions import DuplicateDocumentError, IndexIOError, IndexFormatError
from ..index_base import IndexBase

logger = logging.getLogger(__name__)

Target = Union[str, Path, BinaryIO]


class InvertedIndex(IndexBase):
    """
    Positional inverted index.
    Maps document ids to paths and terms to postings lists.
    """

    def __init__(self):
        # Document id -> path
        self.doc_paths: Dict[int, str] = {}

        # Term -> PostingsList mapping
        self.dictionary: Dict[Hashable, PostingsList] = {}

        # Statistics
        self.num_documents = 0
        self.total_tokens = 0

    def add_document(self, document: Document) -> None:
        """
        Add a document to the index.

        Postings are appended in call order; run optimize() afterwards to get
        postings ordered by doc_id.

        Args:
            document: Parsed document with doc_id, path and term tuples

        Raises:
            DuplicateDocumentError: If the document id was already added
        """
        if document.doc_id in self.doc_paths:
            raise DuplicateDocumentError(document.doc_id)

        self.doc_paths[document.doc_id] = document.path

        # Collect positions for each term
        term_positions = defaultdict(list)
        for term_tuple in document.tuples:
            term_positions[term_tuple.term].append(term_tuple.position)

        for term, positions in term_positions.items():
            self.dictionary.setdefault(term, PostingsList()).add(
                PostingEntry.from_positions(document.doc_id, positions)
            )

        self.num_documents += 1
        self.total_tokens += len(document.tuples)
        logger.debug(f"Indexed document {document.doc_id} ({document.path}): "
                     f"{len(document.tuples)} tokens, {len(term_positions)} terms")

    def optimize(self) -> None:
        """
        Sort every postings list by doc_id and every posting's positions.
        Safe to call more than once.
        """
        for postings in self.dictionary.values():
            postings.sort()
        logger.info(f"Optimized {len(self.dictionary)} postings lists")

    def search(self, term: Hashable) -> Optional[PostingsList]:
        """
        Get postings list for a term.

        Args:
            term: The term to look up

        Returns:
            PostingsList if term exists, None otherwise
        """
        return self.dictionary.get(term)

    def get_dictionary(self) -> Set[Hashable]:
        """Get all terms in the index."""
        return set(self.dictionary.keys())

    def get_doc_name(self, doc_id: int) -> Optional[str]:
        """Get the path stored for a document id, or None."""
        return self.doc_paths.get(doc_id)

    def contains_term(self, term: Hashable) -> bool:
        """Check if term exists in vocabulary."""
        return term in self.dictionary

    def get_document_frequency(self, term: Hashable) -> int:
        """Number of documents containing term (0 if unknown)."""
        postings = self.search(term)
        return postings.document_frequency() if postings else 0

    def get_statistics(self) -> Dict:
        """Get index statistics."""
        total_postings = sum(len(postings) for postings in self.dictionary.values())
        return {
            'num_documents': self.num_documents,
            'vocabulary_size': len(self.dictionary),
            'total_postings': total_postings,
            'total_tokens': self.total_tokens,
            'avg_document_length': self.total_tokens / self.num_documents if self.num_documents > 0 else 0,
            'avg_postings_length': total_postings / len(self.dictionary) if self.dictionary else 0
        }

    def save(self, target: Target) -> None:
        """
        Write the index to a file path or a writable binary stream.

        Raises:
            IndexFormatError: If the index holds a term the format cannot encode
            IndexIOError: If writing fails
        """
        try:
            payload = IndexCodec.encode(self.doc_paths, self.dictionary)
        except IndexFormatError as e:
            logger.error(f"Error encoding index for {_describe(target)}: {e}")
            raise

        try:
            if isinstance(target, (str, Path)):
                with open(target, 'wb') as f:
                    f.write(payload)
            else:
                target.write(payload)
        except (OSError, TypeError) as e:
            logger.error(f"Error saving index to {_describe(target)}: {e}")
            raise IndexIOError(f"Could not write index to {_describe(target)}") from e

        logger.info(f"Saved index to {_describe(target)}: {len(self.doc_paths)} documents, "
                    f"{len(self.dictionary)} terms, {len(payload)} bytes")

    def load(self, source: Target) -> None:
        """
        Replace the index contents with those read from a path or binary stream.

        The current contents are kept if reading or decoding fails.

        Raises:
            IndexIOError: If reading fails
            IndexFormatError: If the payload is malformed or of another version
        """
        try:
            if isinstance(source, (str, Path)):
                with open(source, 'rb') as f:
                    payload = f.read()
            else:
                payload = source.read()
                if not isinstance(payload, (bytes, bytearray)):
                    raise TypeError(f"expected a binary stream, read {type(payload).__name__}")
        except (OSError, TypeError) as e:
            logger.error(f"Error reading index from {_describe(source)}: {e}")
            raise IndexIOError(f"Could not read index from {_describe(source)}") from e

        try:
            doc_paths, dictionary = IndexCodec.decode(payload)
        except IndexFormatError as e:
            logger.error(f"Error loading index from {_describe(source)}: {e}")
            raise

        self.doc_paths = doc_paths
        self.dictionary = dictionary
        self.num_documents = len(doc_paths)
        self.total_tokens = sum(
            postings.total_term_frequency() for postings in dictionary.values()
        )

        logger.info(f"Loaded index from {_describe(source)}: {len(doc_paths)} documents, "
                    f"{len(dictionary)} terms")

    def __len__(self) -> int:
        """Number of indexed documents."""
        return len(self.doc_paths)

    def __str__(self) -> str:
        if not self.doc_paths and not self.dictionary:
            return ''
        lines: List[str] = [f"doc_paths: {self.doc_paths}", "dictionary:"]
        for term in sorted(self.dictionary, key=str):
            postings = ', '.join(
                f"({p.doc_id}, {p.term_freq}, {p.positions})" for p in self.dictionary[term]
            )
            lines.append(f"  {term}: [{postings}]")
        return '\n'.join(lines)


def _describe(target: Target) -> str:
    if isinstance(target, (str, Path)):
        return str(target)
    return str(getattr(target, 'name', type(target).__name__))


def build_index(documents, optimize: bool = True) -> InvertedIndex:
    """
    Build an index from an iterable of documents.

    Args:
        documents: Iterable of Document
        optimize: Whether to sort postings once all documents are added

    Returns:
        The populated index
    """
    index = InvertedIndex()
    for document in documents:
        index.add_document(document)
    if optimize:
        index.optimize()
    logger.info(f"Built index with {index.num_documents} documents, "
                f"{len(index.dictionary)} terms")
    return index
