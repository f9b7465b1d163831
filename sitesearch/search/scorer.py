"""
Fuzzy relevance scoring.

Heuristic substring / word-overlap score, deterministic and dependency-free:

  - Whole query found in the text:  1 - (index / len(text)) * 0.3
  - Otherwise, per query word (2+ chars) found in the text:
        0.8 * (1 - (index / len(text)) * 0.2)
    and the final score is (sum + matches * 0.3) / number_of_query_words

Earlier matches score higher. A whole-query match at position 0 scores 1.0.
"""

import html
import re
from typing import List

MIN_WORD_LENGTH = 2
FULL_MATCH_PENALTY = 0.3
WORD_MATCH_WEIGHT = 0.8
WORD_MATCH_PENALTY = 0.2
WORD_MATCH_BONUS = 0.3


def fuzzy_score(query: str, text: str) -> float:
    """
    Score how well `query` matches `text`.

    Args:
        query: Raw user query
        text: Document field

    Returns:
        Score, 0 for no match; stays near [0, 1]
    """
    if not query or not text:
        return 0.0

    normalized_query = query.lower().strip()
    normalized_text = text.lower()
    if not normalized_query:
        return 0.0

    text_length = len(normalized_text)

    index = normalized_text.find(normalized_query)
    if index != -1:
        position_score = 1 - (index / text_length) * FULL_MATCH_PENALTY
        return 1.0 * position_score

    words = normalized_query.split()
    match_count = 0
    total_score = 0.0

    for word in words:
        if len(word) < MIN_WORD_LENGTH:
            continue
        index = normalized_text.find(word)
        if index != -1:
            match_count += 1
            position_score = 1 - (index / text_length) * WORD_MATCH_PENALTY
            total_score += WORD_MATCH_WEIGHT * position_score

    if not words:
        return 0.0
    return (total_score + match_count * WORD_MATCH_BONUS) / len(words)


def query_terms(query: str) -> List[str]:
    """Lowercased query words long enough to be scored or highlighted."""
    return [w for w in query.lower().strip().split() if len(w) >= MIN_WORD_LENGTH]


def highlight_keywords(text: str, query: str, escape: bool = False) -> str:
    """
    Wrap every query word (2+ chars) in <mark>...</mark>, case-insensitively.

    Args:
        text: Text to highlight
        query: Raw user query
        escape: HTML-escape `text` first (for untrusted content)
    """
    if not query or not text:
        return text

    highlighted = html.escape(text) if escape else text
    terms = query_terms(query)
    if not terms:
        return highlighted

    # Longest first: overlapping terms mark the longer match
    ordered = sorted(set(terms), key=len, reverse=True)
    if escape:
        ordered = [html.escape(t) for t in ordered]
    pattern = re.compile("(" + "|".join(re.escape(t) for t in ordered) + ")", re.IGNORECASE)
    return pattern.sub(lambda m: f"<mark>{m.group(0)}</mark>", highlighted)
