"""
Binary encoding for saved indexes.

Layout (all integers variable-byte encoded, signed ones zig-zag mapped first):

    magic "IIDX" | version
    doc count | (doc_id, path)*
    term count | (term, postings count | (doc_id, term_freq, positions count | position*)*)*

Strings are UTF-8 with a length prefix. A term is a one byte type tag
followed by its text.
"""

from typing import Dict, List, Tuple, Hashable
import io
import logging

from .document import Term
from .postings import PostingEntry, PostingsList
from ..exceptions import IndexFormatError

logger = logging.getLogger(__name__)

MAGIC = b'IIDX'
FORMAT_VERSION = 1

TAG_STR = 1
TAG_TERM = 2


class VariableByteEncoder:
    """
    Variable byte encoding for integers.
    Uses fewer bytes for smaller numbers.

    Encoding format:
    - 7 bits for data per byte
    - 1 bit for continuation (1 = more bytes follow, 0 = last byte)
    """

    @staticmethod
    def encode_number(n: int) -> bytes:
        """
        Encode a single non-negative integer.

        Raises:
            ValueError: If n is negative
        """
        if n < 0:
            raise ValueError("Variable byte encoding only works for non-negative integers")

        if n == 0:
            return bytes([0])

        result = []
        while n > 0:
            byte = n & 0x7F
            n >>= 7
            if result:
                byte |= 0x80
            result.append(byte)

        # Most significant group first
        return bytes(reversed(result))

    @staticmethod
    def decode_number(data: bytes, offset: int = 0) -> Tuple[int, int]:
        """
        Decode a single integer starting at offset.

        Returns:
            Tuple of (decoded_integer, bytes_consumed)

        Raises:
            IndexFormatError: If the data ends before the last byte
        """
        n = 0
        bytes_read = 0

        while offset + bytes_read < len(data):
            byte = data[offset + bytes_read]
            bytes_read += 1
            n = (n << 7) | (byte & 0x7F)
            if (byte & 0x80) == 0:
                return n, bytes_read

        raise IndexFormatError(f"Truncated integer at offset {offset}")


def zigzag_encode(n: int) -> int:
    """Map signed integers onto non-negative ones: 0, -1, 1, -2 -> 0, 1, 2, 3."""
    return n * 2 if n >= 0 else -n * 2 - 1


def zigzag_decode(n: int) -> int:
    return n // 2 if n % 2 == 0 else -(n + 1) // 2


class PayloadWriter:
    """Accumulates encoded values in memory."""

    def __init__(self):
        self._buffer = io.BytesIO()

    def write_uint(self, n: int):
        self._buffer.write(VariableByteEncoder.encode_number(n))

    def write_int(self, n: int):
        self.write_uint(zigzag_encode(n))

    def write_str(self, s: str):
        raw = s.encode('utf-8')
        self.write_uint(len(raw))
        self._buffer.write(raw)

    def write_bytes(self, raw: bytes):
        self._buffer.write(raw)

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()


class PayloadReader:
    """Sequential reader over an encoded payload."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def read_uint(self) -> int:
        n, consumed = VariableByteEncoder.decode_number(self.data, self.offset)
        self.offset += consumed
        return n

    def read_int(self) -> int:
        return zigzag_decode(self.read_uint())

    def read_bytes(self, length: int) -> bytes:
        end = self.offset + length
        if end > len(self.data):
            raise IndexFormatError(
                f"Truncated payload: need {length} bytes at offset {self.offset}, "
                f"{len(self.data) - self.offset} available"
            )
        raw = self.data[self.offset:end]
        self.offset = end
        return raw

    def read_str(self) -> str:
        length = self.read_uint()
        raw = self.read_bytes(length)
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise IndexFormatError(f"Invalid UTF-8 string before offset {self.offset}") from e

    def at_end(self) -> bool:
        return self.offset >= len(self.data)


def _term_key(term: Hashable) -> Tuple[int, str]:
    if isinstance(term, Term):
        return TAG_TERM, term.content
    if isinstance(term, str):
        return TAG_STR, term
    raise IndexFormatError(f"Cannot encode term of type {type(term).__name__}: {term!r}")


class IndexCodec:
    """Encodes and decodes the two index mappings."""

    @staticmethod
    def encode(doc_paths: Dict[int, str], dictionary: Dict[Hashable, PostingsList]) -> bytes:
        """
        Encode both mappings into one payload.

        Entries are written in sorted order so equal indexes produce equal bytes.

        Raises:
            IndexFormatError: If a term has a type the format cannot hold
        """
        writer = PayloadWriter()
        writer.write_bytes(MAGIC)
        writer.write_uint(FORMAT_VERSION)

        writer.write_uint(len(doc_paths))
        for doc_id in sorted(doc_paths):
            writer.write_int(doc_id)
            writer.write_str(doc_paths[doc_id])

        keyed = sorted(((_term_key(term), postings) for term, postings in dictionary.items()),
                       key=lambda item: item[0])
        writer.write_uint(len(keyed))
        for (tag, text), postings in keyed:
            writer.write_uint(tag)
            writer.write_str(text)
            writer.write_uint(len(postings))
            for posting in postings:
                writer.write_int(posting.doc_id)
                writer.write_uint(posting.term_freq)
                writer.write_uint(len(posting.positions))
                for position in posting.positions:
                    writer.write_int(position)

        return writer.getvalue()

    @staticmethod
    def decode(data: bytes) -> Tuple[Dict[int, str], Dict[Hashable, PostingsList]]:
        """
        Decode a payload produced by encode().

        Returns:
            Tuple of (doc_paths, dictionary)

        Raises:
            IndexFormatError: If the payload is malformed, truncated or of another version
        """
        reader = PayloadReader(data)

        magic = reader.read_bytes(len(MAGIC))
        if magic != MAGIC:
            raise IndexFormatError(f"Not an index file (magic {magic!r})")
        version = reader.read_uint()
        if version != FORMAT_VERSION:
            raise IndexFormatError(f"Unsupported index format version {version}")

        doc_paths: Dict[int, str] = {}
        for _ in range(reader.read_uint()):
            doc_id = reader.read_int()
            if doc_id in doc_paths:
                raise IndexFormatError(f"Document {doc_id} appears twice in the document map")
            doc_paths[doc_id] = reader.read_str()

        dictionary: Dict[Hashable, PostingsList] = {}
        for _ in range(reader.read_uint()):
            term = IndexCodec._read_term(reader)
            if term in dictionary:
                raise IndexFormatError(f"Term {term!r} appears twice in the dictionary")
            postings = PostingsList()
            seen = set()
            for _ in range(reader.read_uint()):
                posting = IndexCodec._read_posting(reader)
                if posting.doc_id not in doc_paths:
                    raise IndexFormatError(
                        f"Posting for {term!r} refers to unknown document {posting.doc_id}"
                    )
                if posting.doc_id in seen:
                    raise IndexFormatError(
                        f"Document {posting.doc_id} appears twice in the postings of {term!r}"
                    )
                seen.add(posting.doc_id)
                postings.add(posting)
            dictionary[term] = postings

        if not reader.at_end():
            raise IndexFormatError(
                f"{len(data) - reader.offset} unexpected trailing bytes after index payload"
            )

        logger.debug(f"Decoded {len(doc_paths)} documents and {len(dictionary)} terms")
        return doc_paths, dictionary

    @staticmethod
    def _read_term(reader: PayloadReader) -> Hashable:
        tag = reader.read_uint()
        text = reader.read_str()
        if tag == TAG_STR:
            return text
        if tag == TAG_TERM:
            return Term(text)
        raise IndexFormatError(f"Unknown term tag {tag}")

    @staticmethod
    def _read_posting(reader: PayloadReader) -> PostingEntry:
        doc_id = reader.read_int()
        term_freq = reader.read_uint()
        count = reader.read_uint()
        positions: List[int] = [reader.read_int() for _ in range(count)]
        try:
            return PostingEntry(doc_id=doc_id, term_freq=term_freq, positions=positions)
        except ValueError as e:
            raise IndexFormatError(str(e)) from e
