"""Permalink (slug) generation for quotes and authors."""

import re

NON_SLUG_CHARS = re.compile(r"[^a-z0-9 ]")

AUTHOR_PERMALINK_WORDS = 3
QUOTE_PERMALINK_WORDS = 5


def generate_permalink(text: str, word_count: int = QUOTE_PERMALINK_WORDS) -> str:
    """
    Build a URL-safe permalink from the first words of a text.

    Characters outside a-z, 0-9 and space are deleted (not replaced), so
    "Don't" becomes "dont". Uniqueness is not checked.

    Args:
        text: Source text
        word_count: Maximum number of words to keep

    Returns:
        Hyphen-joined lowercase words, or "" when word_count is 0
    """
    if word_count <= 0:
        return ""
    words = NON_SLUG_CHARS.sub("", text.lower()).split(" ")
    return "-".join([word for word in words if word][:word_count])
