"""
Content store for the ``posts`` and ``projects`` collections.

Each entry is a Markdown file with YAML front matter::

    ---
    title: Building a blog
    pubDatetime: 2024-03-01T09:00:00Z
    modDatetime: 2024-03-04T10:30:00Z
    description: Notes on the rebuild.
    tags: [python, web]
    draft: false
    ---
"""

import os
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Tuple

import yaml

DEFAULT_TAGS = ('others',)
DATE_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M:%S', '%Y-%m-%d', '%b %d, %Y']


class Publication(Protocol):
    """What the filter, sorter and tag helpers need from an entry."""
    title: str
    pub_datetime: datetime
    mod_datetime: Optional[datetime]
    tags: Tuple[str, ...]
    draft: bool


@dataclass(frozen=True)
class Post:
    slug: str
    title: str
    pub_datetime: datetime
    description: str = ''
    tags: Tuple[str, ...] = DEFAULT_TAGS
    draft: bool = False
    mod_datetime: Optional[datetime] = None
    og_image: Optional[str] = None
    body: str = field(default='', repr=False, compare=False)


@dataclass(frozen=True)
class Project:
    slug: str
    title: str
    pub_datetime: datetime
    description: str = ''
    tags: Tuple[str, ...] = DEFAULT_TAGS
    draft: bool = False
    mod_datetime: Optional[datetime] = None
    og_image: Optional[str] = None
    link: Optional[str] = None
    body: str = field(default='', repr=False, compare=False)


def parse_datetime(value: Any) -> datetime:
    """
    Normalise a front matter timestamp to an aware UTC datetime.

    Naive values are taken to be UTC and bare dates mean midnight.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            for fmt in DATE_FORMATS:
                try:
                    dt = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
            else:
                raise ValueError(f"Unrecognised date: {value!r}")
    else:
        raise ValueError(f"Unrecognised date: {value!r}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_front_matter(filepath: str) -> Tuple[Dict[str, Any], str]:
    """Split a Markdown file into its YAML metadata and body."""
    with open(filepath, 'r', encoding='utf-8') as f:
        content = f.read()

    parts = content.split('---', 2)
    if len(parts) >= 3 and not parts[0].strip():
        metadata = yaml.safe_load(parts[1]) or {}
        if not isinstance(metadata, dict):
            raise ValueError("Front matter is not a mapping")
        return metadata, parts[2].strip()
    return {}, content


def _common_fields(slug: str, metadata: Dict[str, Any], body: str) -> Dict[str, Any]:
    for key in ('title', 'pubDatetime'):
        if metadata.get(key) in (None, ''):
            raise ValueError(f"Missing required field '{key}'")

    tags = metadata.get('tags')
    if tags is None:
        tags = DEFAULT_TAGS
    elif isinstance(tags, str):
        tags = (tags,)

    mod = metadata.get('modDatetime')
    return {
        'slug': slug,
        'title': str(metadata['title']),
        'pub_datetime': parse_datetime(metadata['pubDatetime']),
        'mod_datetime': parse_datetime(mod) if mod else None,
        'description': str(metadata.get('description') or ''),
        'tags': tuple(str(tag) for tag in tags),
        'draft': bool(metadata.get('draft', False)),
        'og_image': metadata.get('ogImage') or None,
        'body': body,
    }


def post_from_metadata(slug: str, metadata: Dict[str, Any], body: str = '') -> Post:
    return Post(**_common_fields(slug, metadata, body))


def project_from_metadata(slug: str, metadata: Dict[str, Any], body: str = '') -> Project:
    return Project(link=metadata.get('link') or None, **_common_fields(slug, metadata, body))


class ContentStore:
    """Read-only access to the Markdown collections under ``content_dir``."""

    COLLECTIONS = {
        'posts': post_from_metadata,
        'projects': project_from_metadata,
    }

    def __init__(self, content_dir: str = 'content'):
        if not os.path.isdir(content_dir):
            raise FileNotFoundError(f"Content directory not found: {content_dir}")
        self.content_dir = content_dir
        self.logger = logging.getLogger('Folio.ContentStore')
        self.parse_errors = 0

    def get_collection(self, name: str, include_drafts: bool = True) -> List:
        """Load every entry of a collection, skipping entries that fail to parse."""
        if name not in self.COLLECTIONS:
            raise ValueError(f"Unknown collection: {name}")
        factory = self.COLLECTIONS[name]
        directory = os.path.join(self.content_dir, name)
        if not os.path.isdir(directory):
            self.logger.debug(f"No {name} directory at {directory}")
            return []

        entries = []
        for filename in sorted(os.listdir(directory)):
            if not filename.endswith(('.md', '.mdx')):
                continue
            filepath = os.path.join(directory, filename)
            slug = os.path.splitext(filename)[0]
            try:
                metadata, body = parse_front_matter(filepath)
                entry = factory(slug, metadata, body)
            except (IOError, OSError) as e:
                self.parse_errors += 1
                self.logger.error(f"Failed to read {filepath}: {e}")
                continue
            except yaml.YAMLError as e:
                self.parse_errors += 1
                self.logger.error(f"Invalid YAML front matter in {filepath}: {e}")
                continue
            except (ValueError, TypeError) as e:
                self.parse_errors += 1
                self.logger.error(f"Invalid front matter in {filepath}: {e}")
                continue

            if include_drafts or not entry.draft:
                entries.append(entry)

        self.logger.debug(f"Loaded {len(entries)} {name} from {directory}")
        return entries

    def get_posts(self, include_drafts: bool = True) -> List[Post]:
        return self.get_collection('posts', include_drafts)

    def get_projects(self, include_drafts: bool = True) -> List[Project]:
        return self.get_collection('projects', include_drafts)
