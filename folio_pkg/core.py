import os
import logging
import threading
from datetime import datetime, timedelta
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Dict

import requests

from .content import ContentStore
from .feeds import rss_items
from .fonts import BOLD, REGULAR, FontBook, FontFetchError
from .og_image import OgImageError, OgImageRenderer, OgKind
from .post_filter import PostFilter, visible_posts
from .settings import SiteInfo, scheduled_margin
from .slugify import slugify_str
from .sorting import paginate, sorted_posts
from .tags import posts_by_tag, unique_tags
from .url_validator import SafeRequestor, URLValidator

# Output directory per image kind, matching the site's /posts/ and /projects/ routes
CATEGORIES = {
    OgKind.POST: 'posts',
    OgKind.PROJECT: 'projects',
}

# Below this many images a process pool costs more than it saves
POOL_THRESHOLD = 12

# Per-process storage for the renderer used by pool workers
thread_local = threading.local()


def initializer(fonts, site):
    """Give each worker process its own renderer over the shared font data."""
    thread_local.renderer = OgImageRenderer(fonts, site)


def render_to_file(post, kind, output_path):
    """Pool task: render with the worker's renderer and write the PNG."""
    return write_og_image(thread_local.renderer, post, kind, output_path)


def write_og_image(renderer, post, kind, output_path):
    png = renderer.render(post, kind)
    os.makedirs(os.path.dirname(output_path), exist_ok=True)
    with open(output_path, 'wb') as f:
        f.write(png)
    return output_path


class ConsoleHandler(logging.StreamHandler):
    """Marks the console handler so later Folio instances do not add another."""


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Site build completed in",
            "Loading OG image fonts",
            "Rendering OG images",
            "Visible posts:",
            "Unique tags:",
            "OG images generated:",
            "OG images failed:",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


class Folio:
    def __init__(self, content_dir='content', output_dir='output', site=None, posts_per_page=6,
                 margin=timedelta(minutes=15), dev_mode=False, fonts=None, font_urls=None,
                 font_files=None, font_hosts=None, clock=None, log_dir='logs'):
        self.content_dir = content_dir
        self.output_dir = output_dir
        self.site = site or SiteInfo('https://example.com/', 'My Folio', 'Site Author')
        self.posts_per_page = max(1, int(posts_per_page))
        self.post_filter = PostFilter(margin, dev_mode, clock)
        self.fonts = fonts
        self.font_urls = font_urls
        self.font_files = font_files
        self.log_dir = log_dir
        self.images_generated = 0
        self.image_failures = 0

        self.session = requests.Session()
        self.safe_requestor = SafeRequestor(URLValidator(), self.session, font_hosts)

        self.setup_logging()
        self.store = ContentStore(content_dir)

    @classmethod
    def from_settings(cls, settings: Dict, **kwargs) -> 'Folio':
        """Build a Folio from a merged settings dictionary."""
        font_files = None
        if settings.get('font_regular_file') and settings.get('font_bold_file'):
            font_files = {REGULAR: settings['font_regular_file'], BOLD: settings['font_bold_file']}
        return cls(
            content_dir=settings['content'],
            output_dir=os.path.expanduser(settings['output']),
            site=SiteInfo.from_settings(settings),
            posts_per_page=settings['posts_per_page'],
            margin=scheduled_margin(settings),
            dev_mode=bool(settings.get('dev_mode')),
            font_urls={REGULAR: settings['font_regular_url'], BOLD: settings['font_bold_url']},
            font_files=font_files,
            font_hosts=settings.get('font_hosts'),
            log_dir=settings.get('log_dir'),
            **kwargs
        )

    def setup_logging(self):
        """Set up logging configuration."""
        self.logger = logging.getLogger('Folio')
        self.logger.setLevel(logging.DEBUG)

        # The console handler is shared by every Folio in the process
        if not any(isinstance(h, ConsoleHandler) for h in self.logger.handlers):
            console_handler = ConsoleHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.addFilter(InfoFilter())
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(console_handler)

        # Each Folio writes to its own log_dir until cleanup()
        self.file_handler = None
        if self.log_dir:
            os.makedirs(self.log_dir, exist_ok=True)
            log_filename = datetime.now().strftime('folio_%Y-%m-%d_%H-%M-%S.log')
            self.file_handler = logging.FileHandler(os.path.join(self.log_dir, log_filename))
            self.file_handler.setLevel(logging.DEBUG)
            self.file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            self.logger.addHandler(self.file_handler)

    # Listings

    def get_posts(self, include_drafts=True):
        return self.store.get_posts(include_drafts)

    def get_projects(self, include_drafts=True):
        return self.store.get_projects(include_drafts)

    def visible_posts(self):
        return visible_posts(self.get_posts(), self.post_filter)

    def visible_projects(self):
        return visible_posts(self.get_projects(), self.post_filter)

    def sorted_posts(self):
        return sorted_posts(self.visible_posts())

    def unique_tags(self):
        return unique_tags(self.get_posts(), self.post_filter)

    def posts_by_tag(self, tag):
        return posts_by_tag(self.visible_posts(), tag)

    def post_pages(self):
        return paginate(self.sorted_posts(), self.posts_per_page)

    def rss_items(self):
        return rss_items(self.sorted_posts())

    # OG images

    def og_image_targets(self, kind) -> Dict:
        """
        Entries of one category that need a generated OG image, by slug.

        Drafts and entries with their own ``ogImage`` are skipped. The slug
        comes from the title, so a later entry with the same title slug
        replaces an earlier one. Titles without a single letter or digit
        have no route and are skipped with a warning.
        """
        kind = OgKind(kind)
        entries = self.get_posts() if kind is OgKind.POST else self.get_projects()
        targets = {}
        for entry in entries:
            if entry.draft or entry.og_image:
                continue
            slug = slugify_str(entry.title)
            if not slug:
                self.logger.warning(f"Skipping OG image for '{entry.slug}': title '{entry.title}' has an empty slug")
                continue
            targets[slug] = entry
        return targets

    def og_image_path(self, kind, slug):
        return os.path.join(self.output_dir, CATEGORIES[OgKind(kind)], slug, 'index.png')

    def load_fonts(self) -> FontBook:
        """
        Load the OG image fonts once. Failure stops all image generation.

        Raises:
            FontFetchError: the fonts could not be read or downloaded
        """
        if self.fonts is None:
            self.logger.info("Loading OG image fonts")
            try:
                if self.font_files:
                    self.fonts = FontBook.from_files(self.font_files)
                else:
                    self.fonts = FontBook.fetch(self.safe_requestor, self.font_urls)
            except FontFetchError as e:
                self.logger.error(f"OG image generation aborted: {e}")
                raise
        return self.fonts

    def build_og_images(self) -> Dict[str, str]:
        """Render every OG image target. Returns a map of site route to file path."""
        fonts = self.load_fonts()
        tasks = []
        for kind in CATEGORIES:
            for slug, entry in self.og_image_targets(kind).items():
                route = f"/{CATEGORIES[kind]}/{slug}/index.png"
                tasks.append((route, entry, kind, self.og_image_path(kind, slug)))

        if not tasks:
            self.logger.warning("No entries need an OG image.")
            return {}

        self.logger.info(f"Rendering OG images for {len(tasks)} entries")
        if len(tasks) >= POOL_THRESHOLD:
            return self._render_with_multiprocessing(tasks, fonts)
        return self._render_single_threaded(tasks, fonts)

    def _render_single_threaded(self, tasks, fonts):
        renderer = OgImageRenderer(fonts, self.site)
        written = {}
        for route, entry, kind, output_path in tasks:
            try:
                written[route] = write_og_image(renderer, entry, kind, output_path)
                self.images_generated += 1
            except (OgImageError, IOError, OSError) as e:
                self.image_failures += 1
                self.logger.error(f"Error generating {route}: {e}")
        return written

    def _render_with_multiprocessing(self, tasks, fonts):
        written = {}
        with ProcessPoolExecutor(
            max_workers=os.cpu_count(),
            initializer=initializer,
            initargs=(fonts, self.site)
        ) as executor:
            futures = {
                executor.submit(render_to_file, entry, kind, output_path): route
                for route, entry, kind, output_path in tasks
            }
            for future in as_completed(futures):
                route = futures[future]
                try:
                    written[route] = future.result()
                    self.images_generated += 1
                except (OgImageError, IOError, OSError) as e:
                    self.image_failures += 1
                    self.logger.error(f"Error generating {route}: {e}")
        return written

    def build(self):
        """Main build process."""
        self.logger.info("Starting site build...")
        os.makedirs(self.output_dir, exist_ok=True)

        written = self.build_og_images()

        self.logger.info(f"Visible posts: {len(self.visible_posts())}")
        self.logger.info(f"Unique tags: {len(self.unique_tags())}")
        self.logger.info(f"OG images generated: {self.images_generated}")
        if self.image_failures:
            self.logger.info(f"OG images failed: {self.image_failures}")
        return written

    def __del__(self):
        self.cleanup()

    def cleanup(self):
        """Close the HTTP session and this build's log file."""
        session = getattr(self, 'session', None)
        if session is not None:
            session.close()
        file_handler = getattr(self, 'file_handler', None)
        if file_handler is not None:
            self.logger.removeHandler(file_handler)
            file_handler.close()
            self.file_handler = None
