"""Text helpers for sentence splitting and keyword comparison."""

import re
from typing import List

ABBREVIATIONS = ("e.g.", "i.e.", "etc.", "vs.", "cf.")

STOPWORDS = {
    'a', 'an', 'the', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'of', 'with', 'by', 'from', 'as', 'is', 'are', 'was', 'were', 'be',
    'been', 'being', 'have', 'has', 'had', 'do', 'does', 'did', 'will',
    'would', 'should', 'could', 'may', 'might', 'can', 'must', 'shall',
    'that', 'this', 'these', 'those', 'its', 'it', 'each', 'which', 'if',
    'when', 'given', 'returns', 'return', 'self',
}


def split_into_sentences(text: str) -> List[str]:
    """Split text into sentences using simple regex.

    Periods inside common abbreviations and inside identifiers such as
    ``Array.new`` do not end a sentence.

    Args:
        text: Text to split

    Returns:
        List of sentences
    """
    text = " ".join(text.split())
    if not text:
        return []

    sentence_endings = re.compile(r'([.!?])\s+(?=[A-Z0-9+`<"(])')

    sentences = []
    last_end = 0

    for match in sentence_endings.finditer(text):
        candidate = text[last_end:match.end()].strip()
        if candidate.endswith(ABBREVIATIONS):
            continue
        if candidate:
            sentences.append(candidate)
        last_end = match.end()

    # Add remaining text
    if last_end < len(text):
        remaining = text[last_end:].strip()
        if remaining:
            sentences.append(remaining)

    return sentences


def extract_keywords(text: str) -> set[str]:
    """Extract content keywords from text.

    Args:
        text: Text to extract keywords from

    Returns:
        Set of lowercase keywords with stopwords removed
    """
    words = re.findall(r'\b[a-z][a-z_]{2,}\b', text.lower())
    return {w for w in words if w not in STOPWORDS}


def compute_similarity(text1: str, text2: str) -> float:
    """Compute Jaccard similarity between the keyword sets of two texts.

    Args:
        text1: First text
        text2: Second text

    Returns:
        Similarity score (0.0-1.0)
    """
    words1 = extract_keywords(text1)
    words2 = extract_keywords(text2)

    if not words1 or not words2:
        return 0.0

    intersection = words1 & words2
    union = words1 | words2

    return len(intersection) / len(union) if union else 0.0
