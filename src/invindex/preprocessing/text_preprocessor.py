import string
from typing import List
import nltk
from nltk.stem import PorterStemmer
from nltk.tokenize import RegexpTokenizer

from ..core.document import TermTuple


class TextPreprocessor:
    """Turns raw text into index terms."""

    def __init__(self, config):
        """
        Initialize preprocessor with configuration.

        Args:
            config: Hydra config object with preprocessing settings
        """
        self.config = config
        self.tokenizer = RegexpTokenizer(r"\w+")
        self.stemmer = PorterStemmer() if config.preprocessing.stemming else None

        # Load stopwords if needed
        if config.preprocessing.remove_stopwords:
            self.stopwords = self._load_stopwords()
        else:
            self.stopwords = set()

    @staticmethod
    def _load_stopwords() -> set:
        """Load English stopwords, downloading the corpus on first use."""
        try:
            nltk.data.find('corpora/stopwords')
        except LookupError:
            nltk.download('stopwords', quiet=True)
        from nltk.corpus import stopwords
        return set(stopwords.words('english'))

    def preprocess(self, text: str) -> List[str]:
        """
        Preprocess text according to configuration.

        Args:
            text: Input text string

        Returns:
            List of processed tokens
        """
        if not text:
            return []

        if self.config.preprocessing.lowercase:
            text = text.lower()

        if self.config.preprocessing.remove_punctuation:
            text = text.translate(str.maketrans('', '', string.punctuation))

        tokens = self.tokenizer.tokenize(text)

        # Filter by length
        tokens = [
            token for token in tokens
            if self.config.preprocessing.min_word_length <= len(token) <= self.config.preprocessing.max_word_length
        ]

        if self.stopwords:
            tokens = [token for token in tokens if token not in self.stopwords]

        if self.stemmer:
            tokens = [self.stemmer.stem(token) for token in tokens]

        return tokens

    def to_tuples(self, text: str) -> List[TermTuple]:
        """Preprocess text and pair every token with its position."""
        return [TermTuple(term=token, position=i) for i, token in enumerate(self.preprocess(text))]
