"""Full-text query preparation.

Queries are lower-cased, stripped of punctuation, and reduced to tokens of at
least three characters. The text index matches any of the terms.
"""

import re

NON_WORD = re.compile(r"[^\w\s]")
MIN_TERM_LENGTH = 3


def extract_terms(text: str) -> list[str]:
    """Normalize text into full-text search terms.

    Order is preserved and duplicates are removed.
    """
    words = NON_WORD.sub(" ", text.lower()).split()
    return list(dict.fromkeys(w for w in words if len(w) >= MIN_TERM_LENGTH))

