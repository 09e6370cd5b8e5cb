#!/usr/bin/env python
"""
Command line entry point for building and querying the inverted index.
Uses Fire for CLI and Hydra for configuration management.
"""

import os
import sys
import logging
from pathlib import Path
from typing import List, Optional
import fire
import hydra
from omegaconf import OmegaConf
from dotenv import load_dotenv

# Load .env variables and register resolver
load_dotenv()
OmegaConf.register_new_resolver("env", os.getenv, replace=True)

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from invindex import InvertedIndex, build_index
from invindex.data import DocumentLoader
from invindex.preprocessing import TextPreprocessor


class IndexingCLI:
    """CLI for the inverted index."""

    def __init__(self, config_path: str = "conf", config_name: str = "config"):
        """
        Initialize CLI with configuration.

        Args:
            config_path: Path to config directory, relative to this file
            config_name: Name of main config file
        """
        self.config_path = config_path
        self.config_name = config_name
        self.config = None
        self.logger = None

    def _init_config(self, overrides: Optional[List[str]] = None):
        """Initialize Hydra configuration."""
        with hydra.initialize(version_base=None, config_path=self.config_path):
            self.config = hydra.compose(config_name=self.config_name, overrides=list(overrides or []))

        # Setup logging
        logging.basicConfig(
            level=getattr(logging, self.config.logging.level),
            format=self.config.logging.format
        )
        self.logger = logging.getLogger(__name__)

    def _index_file(self, index_file: Optional[str]) -> Path:
        return Path(index_file) if index_file else Path(self.config.paths.index_file)

    def _load_index(self, index_file: Optional[str]) -> InvertedIndex:
        index = InvertedIndex()
        index.load(self._index_file(index_file))
        return index

    def build(self, source_dir: str = None, index_file: str = None, overrides: List[str] = None):
        """
        Build an index from the text files in a directory and save it.

        Args:
            source_dir: Directory to index (defaults to paths.data_dir)
            index_file: Output file (defaults to paths.index_file)
            overrides: Hydra override strings
        """
        self._init_config(overrides)
        source_dir = source_dir or self.config.paths.data_dir
        target = self._index_file(index_file)

        self.logger.info("=" * 60)
        self.logger.info("BUILDING INDEX")
        self.logger.info("=" * 60)
        self.logger.info(f"Source: {source_dir}")
        self.logger.info(f"Index file: {target}")

        loader = DocumentLoader(self.config, TextPreprocessor(self.config))
        index = build_index(loader.load_documents(source_dir), optimize=self.config.indexing.optimize)

        target.parent.mkdir(parents=True, exist_ok=True)
        index.save(target)

        stats = index.get_statistics()
        self.logger.info(f"Indexed {stats['num_documents']} documents, "
                         f"{stats['vocabulary_size']} terms")
        return stats

    def search(self, term: str, index_file: str = None, overrides: List[str] = None):
        """
        Look up the postings of a term.

        The term goes through the same preprocessing as the indexed text.

        Args:
            term: Term to look up
            index_file: Index file (defaults to paths.index_file)
            overrides: Hydra override strings
        """
        self._init_config(overrides)
        index = self._load_index(index_file)

        tokens = TextPreprocessor(self.config).preprocess(str(term))
        if not tokens:
            self.logger.warning(f"Term '{term}' is empty after preprocessing")
            return []
        key = tokens[0]
        if len(tokens) > 1:
            self.logger.warning(f"'{term}' preprocesses to {len(tokens)} terms {tokens}; "
                                f"searching only '{key}'")

        postings = index.search(key)
        if postings is None:
            self.logger.info(f"{key}: not found")
            return []

        results = []
        for posting in postings:
            path = index.get_doc_name(posting.doc_id)
            results.append({**posting.to_dict(), 'path': path})
        return results

    def doc(self, doc_id: int, index_file: str = None, overrides: List[str] = None):
        """
        Look up the path of a document id.

        Args:
            doc_id: Document id
            index_file: Index file (defaults to paths.index_file)
            overrides: Hydra override strings
        """
        self._init_config(overrides)
        path = self._load_index(index_file).get_doc_name(int(doc_id))
        if path is None:
            self.logger.info(f"{doc_id}: not found")
        return path

    def dictionary(self, limit: int = None, index_file: str = None, overrides: List[str] = None):
        """
        List the indexed terms in sorted order.

        Args:
            limit: Maximum number of terms to return
            index_file: Index file (defaults to paths.index_file)
            overrides: Hydra override strings
        """
        self._init_config(overrides)
        terms = sorted(self._load_index(index_file).get_dictionary(), key=str)
        if limit is not None:
            terms = terms[:int(limit)]
        return [str(term) for term in terms]

    def stats(self, index_file: str = None, overrides: List[str] = None):
        """
        Show index statistics.

        Args:
            index_file: Index file (defaults to paths.index_file)
            overrides: Hydra override strings
        """
        self._init_config(overrides)
        stats = self._load_index(index_file).get_statistics()
        return stats


def main():
    """Main entry point."""
    fire.Fire(IndexingCLI)


if __name__ == "__main__":
    main()
