"""Tests for RSS item mapping and the sitemap filter."""

import pytest

from folio_pkg.feeds import rss_items, sitemap_filter

from conftest import utc


class TestRssItems:
    """Test cases for rss_items."""

    def test_item_fields(self, make_post):
        """Test each post maps to link, title, description and date."""
        post = make_post('Hello', slug='hello', pub=utc(2024, 1, 1), description='Intro')
        assert rss_items([post]) == [{
            'link': 'posts/hello/',
            'title': 'Hello',
            'description': 'Intro',
            'pub_date': utc(2024, 1, 1),
        }]

    def test_pub_date_prefers_modification(self, make_post):
        """Test pub_date is the modification date when present."""
        post = make_post(pub=utc(2024, 1, 1), mod_datetime=utc(2024, 2, 2))
        assert rss_items([post])[0]['pub_date'] == utc(2024, 2, 2)

    def test_order_is_preserved(self, make_post):
        """Test items follow the input order."""
        posts = [make_post('B', slug='b'), make_post('A', slug='a')]
        assert [item['link'] for item in rss_items(posts)] == ['posts/b/', 'posts/a/']


class TestSitemapFilter:
    """Test cases for sitemap_filter."""

    @pytest.mark.parametrize('url', [
        '/tags/',
        '/tags/python/',
        '/tags/python/2/',
        '/search/',
        '/posts/2/',
        '/posts/10',
        '/projects/3/',
        'https://example.com/posts/2/',
        'https://example.com/tags/web/',
    ])
    def test_excluded(self, url):
        """Test listing routes are left out of the sitemap."""
        assert sitemap_filter(url) is False

    @pytest.mark.parametrize('url', [
        '/',
        '/posts/',
        '/posts/first-post/',
        '/projects/folio/',
        '/tagsoup/',
        '/about/',
        'https://example.com/posts/2024-recap/',
        'posts/hello/',
    ])
    def test_included(self, url):
        """Test content pages stay in the sitemap."""
        assert sitemap_filter(url) is True
