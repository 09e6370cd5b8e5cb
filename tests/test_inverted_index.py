"""
Unit tests for the inverted index: build, optimize, query and persistence
Run with: pytest tests/test_inverted_index.py -v
"""

import io
import logging
import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from invindex import (
    Document,
    Term,
    TermTuple,
    InvertedIndex,
    PostingEntry,
    build_index,
    DuplicateDocumentError,
    IndexIOError,
    IndexFormatError,
)


def make_document(doc_id, path, occurrences):
    return Document(doc_id=doc_id, path=path,
                    tuples=[TermTuple(term, position) for term, position in occurrences])


@pytest.fixture
def example_documents():
    """Two small documents with overlapping vocabulary."""
    return [
        make_document(1, "/a.txt", [("cat", 0), ("dog", 1), ("cat", 5)]),
        make_document(2, "/b.txt", [("dog", 0)]),
    ]


@pytest.fixture
def sample_index():
    """Index built out of doc id order with unsorted positions."""
    index = InvertedIndex()
    index.add_document(make_document(3, "/docs/c.txt",
                                     [("the", 4), ("cat", 1), ("the", 0), ("sat", 2)]))
    index.add_document(make_document(1, "/docs/a.txt",
                                     [("the", 0), ("dog", 1), ("the", 2), ("the", 2)]))
    index.add_document(make_document(2, "/docs/b.txt",
                                     [("cat", 0), ("dog", 1), ("cat", 2)]))
    return index


def assert_same_queries(left, right):
    assert left.get_dictionary() == right.get_dictionary()
    for term in left.get_dictionary():
        assert left.search(term) == right.search(term)
    for doc_id in left.doc_paths:
        assert left.get_doc_name(doc_id) == right.get_doc_name(doc_id)
    assert left.doc_paths == right.doc_paths


class TestBuild:
    """Test add_document."""

    def test_create_empty_index(self):
        index = InvertedIndex()
        assert len(index) == 0
        assert index.get_dictionary() == set()
        assert str(index) == ''

    def test_add_single_document(self):
        index = InvertedIndex()
        index.add_document(make_document(1, "/a.txt", [("hello", 0), ("world", 1), ("hello", 2)]))

        assert len(index) == 1
        assert index.get_doc_name(1) == "/a.txt"
        assert index.contains_term("hello")
        assert index.search("hello")[0] == PostingEntry(doc_id=1, term_freq=2, positions=[0, 2])
        assert index.get_document_frequency("world") == 1

    def test_postings_follow_call_order_before_optimize(self, sample_index):
        assert sample_index.search("the").get_doc_ids() == [3, 1]
        assert sample_index.search("cat").get_doc_ids() == [3, 2]

    def test_positions_follow_encounter_order_before_optimize(self, sample_index):
        assert sample_index.search("the").get_positions(3) == [4, 0]

    def test_document_without_terms(self):
        index = InvertedIndex()
        index.add_document(make_document(5, "/empty.txt", []))

        assert index.get_doc_name(5) == "/empty.txt"
        assert index.get_dictionary() == set()

    def test_duplicate_document_rejected(self, example_documents):
        index = InvertedIndex()
        index.add_document(example_documents[0])

        with pytest.raises(DuplicateDocumentError) as exc_info:
            index.add_document(make_document(1, "/other.txt", [("bird", 0)]))

        assert exc_info.value.doc_id == 1
        assert isinstance(exc_info.value, ValueError)
        assert index.get_doc_name(1) == "/a.txt"
        assert not index.contains_term("bird")
        assert len(index.search("cat")) == 1

    def test_frequency_matches_positions(self, sample_index):
        for term in sample_index.get_dictionary():
            for posting in sample_index.search(term):
                assert posting.term_freq == len(posting.positions)

    def test_dictionary_completeness(self, sample_index):
        assert sample_index.get_dictionary() == {"the", "cat", "sat", "dog"}

    def test_every_posting_document_has_a_path(self, sample_index):
        for term in sample_index.get_dictionary():
            for posting in sample_index.search(term):
                assert sample_index.get_doc_name(posting.doc_id) is not None

    def test_term_objects_as_keys(self):
        index = InvertedIndex()
        index.add_document(make_document(1, "/a.txt", [(Term("cat"), 0), (Term("cat"), 3)]))

        assert index.search(Term("cat")).get_positions(1) == [0, 3]
        assert index.search("cat") is None

    def test_statistics(self, example_documents):
        index = build_index(example_documents)
        stats = index.get_statistics()

        assert stats['num_documents'] == 2
        assert stats['vocabulary_size'] == 2
        assert stats['total_postings'] == 3
        assert stats['total_tokens'] == 4
        assert stats['avg_document_length'] == 2.0
        assert stats['avg_postings_length'] == 1.5


class TestOptimize:
    """Test optimize."""

    def test_ordering_after_optimize(self, sample_index):
        sample_index.optimize()

        for term in sample_index.get_dictionary():
            doc_ids = sample_index.search(term).get_doc_ids()
            assert all(a < b for a, b in zip(doc_ids, doc_ids[1:]))
            for posting in sample_index.search(term):
                assert posting.positions == sorted(posting.positions)

    def test_duplicate_positions_preserved(self, sample_index):
        sample_index.optimize()

        posting = sample_index.search("the").get_posting(1)
        assert posting.positions == [0, 2, 2]
        assert posting.term_freq == 3

    def test_optimize_is_idempotent(self, sample_index):
        sample_index.optimize()
        once = {term: sample_index.search(term).to_dict() for term in sample_index.get_dictionary()}

        sample_index.optimize()
        twice = {term: sample_index.search(term).to_dict() for term in sample_index.get_dictionary()}

        assert once == twice

    def test_add_after_optimize_needs_reoptimize(self, sample_index):
        sample_index.optimize()
        sample_index.add_document(make_document(0, "/docs/z.txt", [("cat", 0)]))

        assert sample_index.search("cat").get_doc_ids() == [2, 3, 0]
        sample_index.optimize()
        assert sample_index.search("cat").get_doc_ids() == [0, 2, 3]


class TestQuery:
    """Test search, get_doc_name and get_dictionary."""

    def test_worked_example(self, example_documents):
        index = InvertedIndex()
        for document in example_documents:
            index.add_document(document)
        index.optimize()

        cat = index.search("cat")
        assert len(cat) == 1
        assert cat[0] == PostingEntry(doc_id=1, term_freq=2, positions=[0, 5])

        dog = index.search("dog")
        assert [p.to_dict() for p in dog] == [
            {'doc_id': 1, 'term_freq': 1, 'positions': [1]},
            {'doc_id': 2, 'term_freq': 1, 'positions': [0]},
        ]

        assert index.get_doc_name(2) == "/b.txt"
        assert index.get_doc_name(99) is None
        assert index.get_dictionary() == {"cat", "dog"}

    def test_search_miss(self, sample_index):
        assert sample_index.search("unicorn") is None
        assert sample_index.get_document_frequency("unicorn") == 0

    def test_dictionary_is_a_copy(self, sample_index):
        terms = sample_index.get_dictionary()
        terms.add("extra")
        assert "extra" not in sample_index.get_dictionary()

    def test_string_view(self, example_documents):
        index = build_index(example_documents)
        text = str(index)

        assert "doc_paths: {1: '/a.txt', 2: '/b.txt'}" in text
        assert "  cat: [(1, 2, [0, 5])]" in text


class TestPersistence:
    """Test save and load."""

    def test_round_trip_through_file(self, sample_index, tmp_path):
        sample_index.optimize()
        index_file = tmp_path / "index.bin"

        sample_index.save(index_file)
        restored = InvertedIndex()
        restored.load(index_file)

        assert_same_queries(sample_index, restored)
        assert restored.get_statistics() == sample_index.get_statistics()

    def test_round_trip_through_string_path(self, example_documents, tmp_path):
        index = build_index(example_documents)
        index_file = str(tmp_path / "index.bin")

        index.save(index_file)
        restored = InvertedIndex()
        restored.load(index_file)

        assert_same_queries(index, restored)

    def test_round_trip_through_stream(self, sample_index):
        sample_index.optimize()
        buffer = io.BytesIO()

        sample_index.save(buffer)
        buffer.seek(0)
        restored = InvertedIndex()
        restored.load(buffer)

        assert_same_queries(sample_index, restored)

    def test_round_trip_preserves_term_types(self):
        index = InvertedIndex()
        index.add_document(make_document(1, "/a.txt", [(Term("cat"), 0), ("cat", 1)]))
        buffer = io.BytesIO()
        index.save(buffer)
        buffer.seek(0)

        restored = InvertedIndex()
        restored.load(buffer)

        assert restored.get_dictionary() == {Term("cat"), "cat"}
        assert restored.search(Term("cat")).get_positions(1) == [0]
        assert restored.search("cat").get_positions(1) == [1]

    def test_round_trip_empty_index(self):
        buffer = io.BytesIO()
        InvertedIndex().save(buffer)
        buffer.seek(0)

        restored = InvertedIndex()
        restored.load(buffer)

        assert len(restored) == 0
        assert restored.get_dictionary() == set()

    def test_load_replaces_existing_state(self, sample_index, example_documents):
        buffer = io.BytesIO()
        build_index(example_documents).save(buffer)
        buffer.seek(0)

        sample_index.load(buffer)

        assert sample_index.get_dictionary() == {"cat", "dog"}
        assert sample_index.get_doc_name(3) is None
        assert sample_index.get_doc_name(1) == "/a.txt"

    def test_equal_indexes_save_identical_bytes(self, example_documents):
        forward = build_index(example_documents)
        backward = build_index(reversed(example_documents))

        first, second = io.BytesIO(), io.BytesIO()
        forward.save(first)
        backward.save(second)

        assert first.getvalue() == second.getvalue()

    def test_load_missing_file(self, tmp_path):
        index = InvertedIndex()
        with pytest.raises(IndexIOError) as exc_info:
            index.load(tmp_path / "missing.bin")
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_save_to_missing_directory(self, sample_index, tmp_path):
        with pytest.raises(IndexIOError):
            sample_index.save(tmp_path / "no" / "such" / "dir" / "index.bin")

    def test_failed_load_keeps_state(self, sample_index, tmp_path):
        sample_index.optimize()
        before = {term: sample_index.search(term).to_dict() for term in sample_index.get_dictionary()}

        good = io.BytesIO()
        sample_index.save(good)
        truncated = tmp_path / "truncated.bin"
        truncated.write_bytes(good.getvalue()[:-3])

        with pytest.raises(IndexFormatError):
            sample_index.load(truncated)

        after = {term: sample_index.search(term).to_dict() for term in sample_index.get_dictionary()}
        assert after == before
        assert sample_index.get_doc_name(3) == "/docs/c.txt"

    def test_load_garbage(self):
        index = InvertedIndex()
        with pytest.raises(IndexFormatError):
            index.load(io.BytesIO(b"not an index at all"))

    def test_save_unsupported_term_type(self):
        index = InvertedIndex()
        index.add_document(make_document(1, "/a.txt", [(42, 0)]))
        buffer = io.BytesIO()

        with pytest.raises(IndexFormatError):
            index.save(buffer)
        assert buffer.getvalue() == b""

    def test_save_unsupported_term_type_is_logged(self, caplog):
        index = InvertedIndex()
        index.add_document(make_document(1, "/a.txt", [(42, 0)]))

        with caplog.at_level(logging.ERROR, logger="invindex.core.inverted_index"):
            with pytest.raises(IndexFormatError):
                index.save(io.BytesIO())

        assert any("Error encoding index" in record.getMessage() for record in caplog.records)

    def test_save_to_text_stream(self, example_documents):
        index = build_index(example_documents)

        with pytest.raises(IndexIOError) as exc_info:
            index.save(io.StringIO())
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_load_from_text_stream(self, sample_index):
        with pytest.raises(IndexIOError):
            sample_index.load(io.StringIO("IIDX"))
        assert sample_index.get_doc_name(3) == "/docs/c.txt"
