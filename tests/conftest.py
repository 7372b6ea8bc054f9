"""Test configuration and fixtures for Folio tests."""

import locale
import os
import sys
import pytest
import tempfile
import shutil
from datetime import datetime, timezone
from pathlib import Path

from PIL import ImageFont

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from folio_pkg.content import Post, Project
from folio_pkg.fonts import BOLD, REGULAR, FontBook
from folio_pkg.settings import SiteInfo

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class DefaultFontBook(FontBook):
    """FontBook backed by Pillow's bundled font, so tests need no downloads."""

    def __init__(self):
        super().__init__({REGULAR: b'', BOLD: b''})

    def truetype(self, weight, size):
        return ImageFont.load_default(size=size)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def site():
    return SiteInfo('https://example.com/', 'Example Folio', 'Jane Doe', 'Posts and projects')


@pytest.fixture
def fonts():
    return DefaultFontBook()


@pytest.fixture
def truetype_fonts():
    """FontBook over real TTF bytes (Pillow's bundled Aileron); picklable for worker processes."""
    data = ImageFont.load_default(size=12).font_bytes
    return FontBook({REGULAR: data, BOLD: data})


@pytest.fixture
def make_post():
    """Factory for Post records with sensible defaults."""
    def _make(title='A Post', pub=utc(2024, 1, 1), **kwargs):
        kwargs.setdefault('slug', title.lower().replace(' ', '-'))
        return Post(title=title, pub_datetime=pub, **kwargs)
    return _make


@pytest.fixture
def make_project():
    def _make(title='A Project', pub=utc(2024, 1, 1), **kwargs):
        kwargs.setdefault('slug', title.lower().replace(' ', '-'))
        return Project(title=title, pub_datetime=pub, **kwargs)
    return _make


@pytest.fixture
def mock_content_dir(temp_dir):
    """Create a content directory with posts and projects."""
    content_dir = Path(temp_dir) / 'content'
    posts_dir = content_dir / 'posts'
    projects_dir = content_dir / 'projects'
    posts_dir.mkdir(parents=True)
    projects_dir.mkdir(parents=True)

    (posts_dir / 'a-first.md').write_text("""---
title: First Post
pubDatetime: 2024-01-01
description: The very first post.
tags: [Python, Web]
---

Hello world.
""")

    (posts_dir / 'b-second.md').write_text("""---
title: Second Post
pubDatetime: 2024-03-01T09:00:00Z
modDatetime: 2024-05-01T09:00:00Z
description: An updated post.
tags:
  - python
  - Astro
---

Second body.
""")

    (posts_dir / 'c-draft.md').write_text("""---
title: Draft Post
pubDatetime: 2024-02-01
tags: [secret]
draft: true
---

Not ready.
""")

    (posts_dir / 'd-scheduled.md').write_text("""---
title: Scheduled Post
pubDatetime: 2030-01-01T00:00:00Z
tags: [future]
---

Later.
""")

    (posts_dir / 'e-custom-og.md').write_text("""---
title: Custom Image Post
pubDatetime: 2024-02-01
tags: [web]
ogImage: /images/custom.png
---

Has its own image.
""")

    (posts_dir / 'f-broken.md').write_text("""---
title: [unclosed
pubDatetime: 2024-02-01
---

Broken front matter.
""")

    (posts_dir / 'notes.txt').write_text("not content")

    (projects_dir / 'folio.md').write_text("""---
title: Folio
pubDatetime: 2024-01-15
description: The content pipeline behind this site.
link: https://github.com/example/folio
tags: [python]
---

About the project.
""")

    (projects_dir / 'wip.md').write_text("""---
title: Work In Progress
pubDatetime: 2024-01-20
draft: true
---
""")

    return str(content_dir)


@pytest.fixture
def mock_output_dir(temp_dir):
    """Create a mock output directory."""
    output_dir = Path(temp_dir) / 'output'
    output_dir.mkdir()
    return str(output_dir)


@pytest.fixture
def folio(mock_content_dir, mock_output_dir, site, fonts, fixed_now):
    """A Folio over the mock content with injected fonts and clock."""
    from folio_pkg import Folio
    generator = Folio(
        content_dir=mock_content_dir,
        output_dir=mock_output_dir,
        site=site,
        fonts=fonts,
        clock=lambda: fixed_now,
        log_dir=None,
    )
    yield generator
    generator.cleanup()


@pytest.fixture(autouse=True)
def restore_collation():
    """Put LC_COLLATE back after tests that switch the collation locale."""
    saved = locale.setlocale(locale.LC_COLLATE)
    yield
    locale.setlocale(locale.LC_COLLATE, saved)
