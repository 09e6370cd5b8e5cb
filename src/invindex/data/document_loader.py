import logging
from pathlib import Path
from typing import Iterator, List
from tqdm import tqdm

from ..core.document import Document

logger = logging.getLogger(__name__)


class DocumentLoader:
    """Reads text files from a directory and turns them into documents."""

    def __init__(self, config, preprocessor):
        """
        Initialize document loader.

        Args:
            config: Hydra configuration object
            preprocessor: TextPreprocessor used to produce term tuples
        """
        self.config = config
        self.preprocessor = preprocessor

    def find_files(self, source_dir) -> List[Path]:
        """
        List indexable files under source_dir in sorted order.

        Raises:
            FileNotFoundError: If source_dir does not exist
        """
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            raise FileNotFoundError(f"Source directory not found: {source_dir}")

        extensions = {ext.lower() for ext in self.config.indexing.file_extensions}
        return sorted(
            p for p in source_dir.rglob('*')
            if p.is_file() and p.suffix.lower() in extensions
        )

    def load_documents(self, source_dir) -> Iterator[Document]:
        """
        Load documents from a directory.

        Doc ids are assigned from 0 in sorted path order. Unreadable files are
        skipped and do not consume an id.

        Yields:
            Document objects
        """
        files = self.find_files(source_dir)
        logger.info(f"Loading {len(files)} documents from: {source_dir}")

        doc_id = 0
        for path in tqdm(files, desc="Loading documents", disable=not self.config.indexing.show_progress):
            try:
                text = path.read_text(encoding=self.config.indexing.encoding)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping {path}: {e}")
                continue

            yield Document(doc_id=doc_id, path=str(path), tuples=self.preprocessor.to_tuples(text))
            doc_id += 1
