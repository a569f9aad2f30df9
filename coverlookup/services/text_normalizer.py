"""Title and author normalization used to build relaxed search queries."""

import re
from typing import List, Set

STOPWORDS = frozenset({
    'a', 'an', 'the', 'of', 'and', 'or', 'in', 'on', 'at', 'to', 'for',
    'with', 'by', 'from', 'into',
})

MARKETING_PHRASES = (
    r'Now\s+a\s+Netflix\s+Series',
    r'Now\s+a\s+Major\s+Motion\s+Picture',
    r'Major\s+Motion\s+Picture',
    r'Sunday\s+Times\s+Bestseller',
    r'New\s+York\s+Times\s+Bestseller',
    r'Political\s+Dystopian\s+Classic',
    r'the\s+Bestselling\s+True\s+Story',
)

# Applied in order; each rule strips from its match to the end of the title.
_SIMPLIFY_RULES = (
    # Subtitles after a colon or dash
    re.compile(r'\s*[:\-–—].*$'),
    # Trailing series/edition info in parentheses or brackets
    re.compile(r'\s*[(\[][^)\]]*[)\]]\s*$'),
    # Publisher, edition and series markers
    re.compile(
        r'\s*\b(Penguin|Vintage|Modern|Oxford|Classics?|Edition|Deluxe|Unabridged|'
        r'Complete|Masterworks?|Library)\b.*$',
        re.IGNORECASE,
    ),
    # "The gripping ...", "The bestselling ..."
    re.compile(
        r'\s*:?\s*\bThe\s+(gripping|inspiring|classic|bestselling|acclaimed|award[- ]winning|'
        r'timeless|definitive|original|complete|unputdownable)\b.*$',
        re.IGNORECASE,
    ),
    # "A Novel", "A Memoir", ...
    re.compile(
        r'\s*:?\s*\bA\s+(Novel|Story|Memoir|Biography|Collection|Guide|History|Study)\b.*$',
        re.IGNORECASE,
    ),
    re.compile(r'\s*:?\s*(' + '|'.join(MARKETING_PHRASES) + r').*$', re.IGNORECASE),
    # Year ranges and standalone years
    re.compile(r'\s*[(\[]?\d{4}\s*[\-–]\s*\d{4}[)\]]?.*$'),
    re.compile(r'\s*[(\[]\d{4}[)\]]\s*$'),
    # Dangling series markers like "S."
    re.compile(r'\s+S\.\s*$', re.IGNORECASE),
)

_WHITESPACE = re.compile(r'\s+')
_TRAILING_PUNCTUATION = re.compile(r'[\s,;.]+$')
_PUNCTUATION = re.compile(r'[^\w\s]')
_NON_ALPHA = re.compile(r'[^A-Za-z\s]')


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(' ', text).strip()


def strip_punctuation(text: str) -> str:
    """Remove punctuation and collapse whitespace."""
    return collapse_whitespace(_PUNCTUATION.sub(' ', text))


def simplify_title(title: str) -> str:
    """Strip subtitles, edition markers and marketing boilerplate from a title.

    Falls back to the whitespace-collapsed title when the rules would leave
    nothing behind.
    """
    simplified = title
    for rule in _SIMPLIFY_RULES:
        simplified = rule.sub('', simplified)

    simplified = _TRAILING_PUNCTUATION.sub('', collapse_whitespace(simplified))
    return simplified or collapse_whitespace(title)


def clean_author(author: str) -> str:
    """Remove punctuation from an author name ("J.R.R. Tolkien" -> "JRR Tolkien")."""
    return collapse_whitespace(re.sub(r'[^\w\s]', '', author))


def last_name(author: str) -> str:
    """Return the last whitespace-separated token of an author name."""
    parts = author.split()
    return parts[-1] if parts else author


def remove_stopwords(text: str) -> str:
    return ' '.join(w for w in text.split() if w.lower() not in STOPWORDS)


def title_variants(title: str) -> List[str]:
    """Generate search variants from most specific to most relaxed.

    Order: simplified title, simplified without stopwords, 3- and 2-word
    prefixes (only for titles longer than 3 words), alphabetic-only form and
    the depunctuated raw title. Duplicates and blanks are dropped.
    """
    simplified = simplify_title(title)
    words = simplified.split()

    candidates = [simplified, remove_stopwords(simplified)]
    if len(words) > 3:
        candidates.append(' '.join(words[:3]))
        candidates.append(' '.join(words[:2]))
    candidates.append(collapse_whitespace(_NON_ALPHA.sub(' ', simplified)))
    candidates.append(strip_punctuation(title))

    variants: List[str] = []
    for candidate in candidates:
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants


def content_words(text: str) -> Set[str]:
    """Lower-cased words longer than three characters."""
    return {w for w in strip_punctuation(text).lower().split() if len(w) > 3}
