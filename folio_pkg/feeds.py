"""
Feed and sitemap helpers.

Only the mapping from posts to RSS items and the sitemap URL filter live
here; serialising the feed and the sitemap is left to the site framework.
"""

import re
from typing import Dict, Iterable, List
from urllib.parse import urlparse

from .sorting import effective_datetime

# Listing routes that should not be indexed
SITEMAP_EXCLUDES = [
    re.compile(r'^/tags(/|$)'),
    re.compile(r'^/search/?$'),
    re.compile(r'^/posts/\d+/?$'),
    re.compile(r'^/projects/\d+/?$'),
]


def rss_items(posts: Iterable) -> List[Dict]:
    """Map posts (already filtered and sorted) to RSS item fields."""
    return [
        {
            'link': f"posts/{post.slug}/",
            'title': post.title,
            'description': post.description,
            'pub_date': effective_datetime(post),
        }
        for post in posts
    ]


def sitemap_filter(url: str) -> bool:
    """Return False for tag, search and paginated listing pages."""
    path = urlparse(url).path or '/'
    if not path.startswith('/'):
        path = '/' + path
    return not any(pattern.search(path) for pattern in SITEMAP_EXCLUDES)
