"""Tests for the folio command line."""

import os
import pytest
from pathlib import Path
from unittest.mock import patch

from folio_pkg.cli import build_parser, main
from folio_pkg.og_image import PNG_SIGNATURE
from folio_pkg.url_validator import SafeRequestor


class TestCli:
    """Test cases for the CLI entry point."""

    def test_parser_flags(self):
        """Test flags map onto settings keys."""
        args = build_parser().parse_args(['--content', 'c', '--dev', '--margin', '5', '--site-url', 'https://x.y'])
        assert args.content == 'c'
        assert args.dev_mode is True
        assert args.scheduled_post_margin == 5.0
        assert args.site_url == 'https://x.y'

    def test_dev_flag_absent_is_none(self):
        """Test an absent --dev leaves the config file value alone."""
        assert build_parser().parse_args([]).dev_mode is None

    def test_init_creates_config_and_content(self, temp_dir, monkeypatch):
        """Test --init writes folio.yml and sample entries."""
        monkeypatch.chdir(temp_dir)
        main(['--init', 'yml'])
        assert Path(temp_dir, 'folio.yml').exists()
        assert Path(temp_dir, 'content', 'posts', 'hello-folio.md').exists()
        assert Path(temp_dir, 'content', 'projects', 'folio.md').exists()

    def test_build_after_init(self, temp_dir, monkeypatch, fonts):
        """Test a full build renders the sample entries."""
        monkeypatch.chdir(temp_dir)
        main(['--init', 'yml'])
        with patch('folio_pkg.core.FontBook.fetch', return_value=fonts):
            main(['--output', 'site'])
        post_png = Path(temp_dir, 'site', 'posts', 'hello-folio', 'index.png')
        project_png = Path(temp_dir, 'site', 'projects', 'folio', 'index.png')
        assert post_png.read_bytes()[:8] == PNG_SIGNATURE
        assert project_png.exists()

    def test_font_failure_exits(self, temp_dir, monkeypatch, capsys):
        """Test a font fetch failure ends the build with exit code 1."""
        monkeypatch.chdir(temp_dir)
        main(['--init', 'yml'])
        with patch.object(SafeRequestor, 'safe_font_get', return_value=(False, 'offline')):
            with pytest.raises(SystemExit) as excinfo:
                main([])
        assert excinfo.value.code == 1
        assert 'offline' in capsys.readouterr().err
        assert not os.path.exists(os.path.join(temp_dir, 'output', 'posts'))

    def test_collation_follows_environment(self, temp_dir, monkeypatch):
        """Test the CLI switches tag collation to the user's locale."""
        monkeypatch.chdir(temp_dir)
        with patch('folio_pkg.cli.use_system_collation') as use_system_collation:
            main(['--init', 'yml'])
        use_system_collation.assert_called_once_with()
