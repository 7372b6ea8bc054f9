"""
Slug helpers for titles and tags.
"""

import re
from typing import Iterable, List

# Anything that is not a letter or digit, in any script
NON_ALNUM = re.compile(r'[\W_]+', re.UNICODE)


def slugify_str(text: str) -> str:
    """Turn a display string into a lowercase, hyphen separated slug."""
    slug = NON_ALNUM.sub('-', text.strip().lower())
    return slug.strip('-')


def slugify_all(texts: Iterable[str]) -> List[str]:
    """Slugify every string, keeping order and duplicates."""
    return [slugify_str(text) for text in texts]
