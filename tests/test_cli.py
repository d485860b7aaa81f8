"""Tests for cli module."""

import json
from unittest.mock import MagicMock, patch

import pytest

from video_playlister import cli
from video_playlister.errors import NotFoundError, ServerError
from video_playlister.models import Page, PageView, SearchEntry
from video_playlister.paginator import Paginator


def make_view(page_number, has_next):
    entry = SearchEntry(f"Song {page_number} by A", f"https://www.youtube.com/results?search_query={page_number}")
    return PageView(
        playlist_id="abc",
        page_number=page_number,
        page=Page(entries=(entry,), has_next=has_next),
        previous_available=page_number > 1,
        next_available=has_next,
    )


@pytest.fixture
def fake_paginator():
    paginator = MagicMock(spec=Paginator)
    paginator.resolve_page.side_effect = lambda uri, page: make_view(int(page), int(page) < 2)
    return paginator


class TestInit:
    """Tests for the init command."""

    def test_creates_sample_config(self, mock_config_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["init"])

        assert exc_info.value.code == 0
        with open(mock_config_dir / "config.json") as f:
            config = json.load(f)
        assert config["mode"] == "music video"
        assert "client_id" in config and "client_secret" in config
        assert "Created config file" in capsys.readouterr().out

    def test_refuses_to_overwrite(self, mock_config_dir, capsys):
        (mock_config_dir / "config.json").write_text('{"client_id": "keep"}')

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["init"])

        assert exc_info.value.code == 1
        assert json.loads((mock_config_dir / "config.json").read_text()) == {"client_id": "keep"}
        assert "--force" in capsys.readouterr().out

    def test_force_overwrites(self, mock_config_dir):
        (mock_config_dir / "config.json").write_text('{"client_id": "old"}')

        with pytest.raises(SystemExit):
            cli.main(["init", "--force"])

        assert json.loads((mock_config_dir / "config.json").read_text())["client_id"] != "old"


class TestMain:
    """Tests for main entry point."""

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 0
        assert "usage:" in capsys.readouterr().out

    def test_missing_credentials_exit_1(self, mock_config_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["status"])

        assert exc_info.value.code == 1
        assert "spotify client id is empty" in capsys.readouterr().out

    def test_unknown_mode_exit_1(self, mock_config_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["status", "--client-id", "id", "--client-secret", "secret", "--mode", "karaoke"])

        assert exc_info.value.code == 1
        assert "Unknown search mode" in capsys.readouterr().out

    def test_web_uses_configured_port(self, mock_config_dir):
        with patch("video_playlister.web.run_web_server", return_value=0) as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["web", "--client-id", "id", "--client-secret", "secret", "--port", "8080"])

        assert exc_info.value.code == 0
        paginator = mock_run.call_args.args[0]
        assert isinstance(paginator, Paginator)
        assert mock_run.call_args.kwargs["port"] == 8080


class TestStatus:
    """Tests for the status command."""

    def test_reports_token_ok(self, mock_config_dir, capsys):
        with patch.object(cli.Paginator, "from_settings") as from_settings:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["status", "--client-id", "id", "--client-secret", "secret"])

        assert exc_info.value.code == 0
        from_settings.return_value.credentials.ensure_valid.assert_called_once_with()
        assert "✓ Spotify token OK" in capsys.readouterr().out

    def test_reports_token_failure(self, mock_config_dir, capsys):
        with patch.object(cli.Paginator, "from_settings") as from_settings:
            from_settings.return_value.credentials.ensure_valid.side_effect = ServerError("down")
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["status", "--client-id", "id", "--client-secret", "secret"])

        assert exc_info.value.code == 1
        assert "✗ Spotify token request failed: down" in capsys.readouterr().out


class TestBrowseLoop:
    """Tests for browse_loop function."""

    def test_pages_forward_and_back(self, fake_paginator, capsys):
        with patch("builtins.input", side_effect=["abc", "n", "p", "q"]):
            result = cli.browse_loop(fake_paginator)

        assert result == 0
        pages = [c.args[1] for c in fake_paginator.resolve_page.call_args_list]
        assert pages == [1, 2, 1]
        out = capsys.readouterr().out
        assert "Song 1 by A" in out
        assert "Song 2 by A" in out

    def test_blank_uri_quits(self, fake_paginator):
        with patch("builtins.input", side_effect=[""]):
            assert cli.browse_loop(fake_paginator) == 0

        fake_paginator.resolve_page.assert_not_called()

    def test_not_found_asks_again(self, fake_paginator, capsys):
        fake_paginator.resolve_page.side_effect = [NotFoundError("not found"), make_view(1, False)]

        with patch("builtins.input", side_effect=["nope", "abc", "q"]):
            cli.browse_loop(fake_paginator)

        assert "playlist not found by uri 'nope'" in capsys.readouterr().out

    def test_ignores_unavailable_direction(self, fake_paginator, capsys):
        """Should not go back from the first page."""
        with patch("builtins.input", side_effect=["p", "q"]):
            cli.browse_loop(fake_paginator, "abc")

        assert fake_paginator.resolve_page.call_count == 1
        assert "Unknown choice 'p'" in capsys.readouterr().out

    def test_failed_page_keeps_current(self, fake_paginator, capsys):
        fake_paginator.resolve_page.side_effect = [make_view(1, True), ServerError("boom")]

        with patch("builtins.input", side_effect=["n", "q"]) as mock_input:
            cli.browse_loop(fake_paginator, "abc")

        assert "server error" in capsys.readouterr().out
        assert "[n]ext" in mock_input.call_args_list[-1].args[0]
