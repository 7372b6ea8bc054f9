#!/usr/bin/env python3
"""
Command-line interface for Folio.
"""

import os
import sys
import argparse
import time
from typing import Dict, Optional

from . import __version__
from .core import Folio
from .settings import FolioSettings
from .tags import use_system_collation

SAMPLE_POST = """---
title: Hello, Folio
pubDatetime: 2024-01-01T09:00:00Z
description: The first post of this site.
tags:
  - meta
draft: false
---

Welcome! Replace this post with your own writing.
"""

SAMPLE_PROJECT = """---
title: Folio
pubDatetime: 2024-01-01T09:00:00Z
description: The content pipeline behind this site.
link: https://example.com/folio
tags:
  - python
---

What the project does and why it exists.
"""


def create_starter_content(content_dir: str = 'content') -> None:
    """Create content/posts and content/projects with one sample entry each."""
    samples = {
        os.path.join(content_dir, 'posts', 'hello-folio.md'): SAMPLE_POST,
        os.path.join(content_dir, 'projects', 'folio.md'): SAMPLE_PROJECT,
    }
    for path, text in samples.items():
        os.makedirs(os.path.dirname(path), exist_ok=True)
        if os.path.exists(path):
            print(f"Sample already exists: {path}")
            continue
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
        print(f"Created sample: {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Folio - blog and portfolio content pipeline')
    parser.add_argument('--content', type=str,
                        help='Content directory containing posts/ and projects/')
    parser.add_argument('--output', type=str,
                        help='Output directory for generated OG images')
    parser.add_argument('--site-url', type=str, dest='site_url',
                        help='Public URL of the site')
    parser.add_argument('--dev', action='store_const', const=True, dest='dev_mode',
                        help='Show scheduled posts regardless of their publish time')
    parser.add_argument('--margin', type=float, dest='scheduled_post_margin',
                        help='Scheduled post margin in minutes')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file and starter content')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[list] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    use_system_collation()

    if args.init:
        settings_loader = FolioSettings()
        config_path = settings_loader.create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")
        create_starter_content()
        return

    start_time = time.time()
    try:
        settings_loader = FolioSettings()
        settings_loader.load_settings()
        args_dict: Dict = {k: v for k, v in vars(args).items() if v is not None and k != 'init'}
        final_settings = settings_loader.merge_with_args(args_dict)

        generator = Folio.from_settings(final_settings)
        generator.build()
        generator.logger.info(f"Site build completed in {time.time() - start_time:.6f} seconds.")
        generator.cleanup()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
