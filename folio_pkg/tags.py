"""
Tag aggregation across publications.
"""

import locale
from typing import Callable, Iterable, List, NamedTuple

from .content import Publication
from .slugify import slugify_all, slugify_str
from .sorting import sorted_posts


class Tag(NamedTuple):
    tag: str
    tag_name: str


def use_system_collation() -> str:
    """
    Collate with the user's locale (``LC_COLLATE`` from the environment).

    Python starts in the C locale, where collation is code point order and
    accented tags sort after ``z``. Falls back to C when the environment
    names a locale that is not installed.
    """
    try:
        return locale.setlocale(locale.LC_COLLATE, '')
    except locale.Error:
        return locale.setlocale(locale.LC_COLLATE, 'C')


def unique_tags(posts: Iterable[Publication], post_filter: Callable) -> List[Tag]:
    """
    Collect the tags of all visible posts, one entry per slug.

    When two spellings share a slug ("C++" and "c  ++"), the spelling met
    first while walking posts and their tags names the entry. The result is
    sorted by slug with the current locale's collation.
    """
    seen = {}
    for post in posts:
        if not post_filter(post):
            continue
        for name in post.tags:
            slug = slugify_str(name)
            if slug not in seen:
                seen[slug] = Tag(slug, name)
    return sorted(seen.values(), key=lambda t: locale.strxfrm(t.tag))


def posts_by_tag(posts: Iterable, tag: str) -> List:
    """Posts carrying ``tag`` (a slug), newest first."""
    return sorted_posts(post for post in posts if tag in slugify_all(post.tags))
