"""Tests for text helpers."""

from docconform.utils.text import compute_similarity, extract_keywords, split_into_sentences


def test_split_into_sentences():
    """Test sentence splitting."""
    text = "This is sentence one. This is sentence two! This is sentence three?"
    sentences = split_into_sentences(text)

    assert len(sentences) == 3
    assert "sentence one" in sentences[0]
    assert "sentence two" in sentences[1]
    assert "sentence three" in sentences[2]


def test_split_keeps_abbreviations_and_identifiers():
    text = "Counts elements, e.g. Strings. Uses Array.new internally."
    sentences = split_into_sentences(text)

    assert sentences == ["Counts elements, e.g. Strings.", "Uses Array.new internally."]


def test_split_empty():
    assert split_into_sentences("   ") == []


def test_extract_keywords():
    assert extract_keywords("Returns the count of elements") == {"count", "elements"}


def test_compute_similarity():
    assert compute_similarity("counts the elements", "the elements counts") == 1.0
    assert compute_similarity("counts elements", "rotates array") == 0.0
    assert compute_similarity("", "anything") == 0.0
