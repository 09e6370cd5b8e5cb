from abc import ABC, abstractmethod
from typing import Hashable, Optional, Set, Any


class IndexBase(ABC):
    """
    Base index class with abstract methods to inherit for specific implementations.

    Lifecycle: add_document() for every document, optimize() once, then
    query or save(). A fresh index can skip the build by calling load().
    """

    @abstractmethod
    def add_document(self, document) -> None:
        """
        Adds one parsed document to the index.

        Args:
            document: Object exposing doc_id, path and tuples of (term, position)
        """
        pass

    @abstractmethod
    def optimize(self) -> None:
        """Orders postings by document id and positions by offset."""
        pass

    @abstractmethod
    def search(self, term: Hashable) -> Optional[Any]:
        """
        Returns the postings list for term, or None if the term is not indexed.

        Args:
            term: Exact term to look up
        """
        pass

    @abstractmethod
    def get_dictionary(self) -> Set[Hashable]:
        """Returns the set of all indexed terms."""
        pass

    @abstractmethod
    def get_doc_name(self, doc_id: int) -> Optional[str]:
        """Returns the path stored for doc_id, or None."""
        pass

    @abstractmethod
    def save(self, target) -> None:
        """
        Serializes the index.

        Args:
            target: File path or writable binary stream
        """
        pass

    @abstractmethod
    def load(self, source) -> None:
        """
        Replaces the index contents with a serialized index.

        Args:
            source: File path or readable binary stream
        """
        pass
