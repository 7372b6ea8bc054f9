"""
Visibility rules for posts and projects.

A publication is visible when it is not a draft and its publish time has
passed, give or take the scheduled post margin. Development builds show
every non-draft entry regardless of schedule.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional

from .content import Publication


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_visible(post: Publication, now: datetime, margin: timedelta, dev_mode: bool) -> bool:
    """Return True if the post may be listed publicly at ``now``."""
    if post.draft:
        return False
    return dev_mode or now > post.pub_datetime - margin


class PostFilter:
    """Visibility predicate bound to the site's margin, mode and clock."""

    def __init__(self, margin: timedelta = timedelta(minutes=15), dev_mode: bool = False,
                 clock: Optional[Callable[[], datetime]] = None):
        self.margin = margin
        self.dev_mode = dev_mode
        self.clock = clock or utc_now

    def __call__(self, post: Publication) -> bool:
        return is_visible(post, self.clock(), self.margin, self.dev_mode)


def visible_posts(posts: Iterable, post_filter: Callable) -> List:
    """Keep the visible posts, in input order."""
    return [post for post in posts if post_filter(post)]
