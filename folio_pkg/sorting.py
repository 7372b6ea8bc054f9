"""
Ordering and pagination of publications.
"""

from typing import Iterable, List, NamedTuple


def effective_datetime(post):
    """Last modification time if there is one, publish time otherwise."""
    return post.mod_datetime or post.pub_datetime


def sorted_posts(posts: Iterable) -> List:
    """Return a new list, newest first. Ties keep their input order."""
    # sorted() is stable, including with reverse=True
    return sorted(posts, key=effective_datetime, reverse=True)


class Page(NamedTuple):
    number: int
    total: int
    items: List

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total


def paginate(posts: List, per_page: int) -> List[Page]:
    """
    Split an already sorted list into 1-based pages.

    An empty list still produces one (empty) page so listing routes always
    have a first page to render.
    """
    per_page = max(1, int(per_page))
    total = max(1, (len(posts) + per_page - 1) // per_page)
    return [
        Page(number, total, list(posts[(number - 1) * per_page:number * per_page]))
        for number in range(1, total + 1)
    ]
