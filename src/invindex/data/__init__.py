"""Document producers for the index."""

from .document_loader import DocumentLoader

__all__ = ['DocumentLoader']
