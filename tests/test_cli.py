"""
Tests for readmegen.cli module.

Tests argument handling and the render/export pipeline end to end.
"""

import base64
import json
from unittest.mock import MagicMock, patch

import pytest

from readmegen.cli import create_parser, load_descriptor, main, parse_link
from readmegen.renderer import PLACEHOLDER_LOGO_URI, render_readme
from readmegen.schema import DescriptorError, Link, sample_descriptor

PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


@pytest.fixture
def descriptor_file(tmp_path):
    path = tmp_path / "project.json"
    path.write_text(json.dumps({
        "title": "X",
        "description": "Y",
        "links": [{"label": "A", "url": "#"}],
    }), encoding="utf-8")
    return path


class TestParser:
    """Tests for the argument parser."""

    def test_defaults(self):
        args = create_parser().parse_args([])
        assert args.descriptor is None
        assert args.view == "raw"
        assert args.dry_run is False
        assert args.link == []

    def test_parse_link(self):
        assert parse_link("Docs=https://x.io/?a=b") == Link("Docs", "https://x.io/?a=b")

    def test_parse_link_requires_equals(self):
        with pytest.raises(DescriptorError):
            parse_link("Docs")


class TestLoadDescriptor:
    """Tests for loading descriptor files."""

    def test_load_file(self, descriptor_file):
        descriptor = load_descriptor(descriptor_file)
        assert descriptor.title == "X"
        assert descriptor.links == (Link("A", "#"),)

    def test_load_sample(self):
        assert load_descriptor(None, sample=True) == sample_descriptor()

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DescriptorError):
            load_descriptor(path)


class TestMain:
    """Tests for the CLI entry point."""

    def test_dry_run_prints_raw(self, descriptor_file, capsys):
        exit_code = main([str(descriptor_file), "--dry-run", "-q"])

        captured = capsys.readouterr()
        assert exit_code == 0
        assert captured.out == render_readme(load_descriptor(descriptor_file)) + "\n"
        assert captured.err == ""

    def test_dry_run_rendered_view(self, descriptor_file, capsys):
        exit_code = main([str(descriptor_file), "--dry-run", "--view", "rendered", "-q"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert '<div class="markdown-body">' in out
        assert "w-32 h-32" in out

    def test_writes_readme(self, descriptor_file, tmp_path):
        out_dir = tmp_path / "out"
        exit_code = main([str(descriptor_file), "-o", str(out_dir), "-q"])

        assert exit_code == 0
        text = (out_dir / "README.md").read_text(encoding="utf-8")
        assert PLACEHOLDER_LOGO_URI in text
        assert '<h1 align="center">X</h1>' in text

    def test_refuses_to_overwrite(self, descriptor_file, tmp_path, capsys):
        (tmp_path / "README.md").write_text("keep me", encoding="utf-8")

        exit_code = main([str(descriptor_file), "-o", str(tmp_path), "-q"])

        assert exit_code == 1
        assert "already exists" in capsys.readouterr().err
        assert (tmp_path / "README.md").read_text(encoding="utf-8") == "keep me"

    def test_force_overwrites(self, descriptor_file, tmp_path):
        (tmp_path / "README.md").write_text("STALE-CONTENT", encoding="utf-8")
        assert main([str(descriptor_file), "-o", str(tmp_path), "--force", "-q"]) == 0
        assert "STALE-CONTENT" not in (tmp_path / "README.md").read_text(encoding="utf-8")

    def test_flag_overrides(self, capsys):
        exit_code = main([
            "--title", "CLI App",
            "--description", "Made from flags",
            "--link", "Home=/",
            "--link", "Docs=/docs",
            "--badge", "PWA",
            "--screenshot", "https://example.com/shot.png",
            "--dry-run", "-q",
        ])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert '<h1 align="center">CLI App</h1>' in out
        assert "pwa-shields.com" in out
        assert out.count("·") == 1
        assert 'alt="Screenshot 1" src="https://example.com/shot.png"' in out

    def test_local_logo_is_embedded(self, tmp_path, capsys):
        logo = tmp_path / "logo.png"
        logo.write_bytes(PNG_BYTES)

        assert main(["--logo", str(logo), "--dry-run", "-q"]) == 0
        assert 'src="data:image/png;base64,' in capsys.readouterr().out

    def test_bad_image_is_an_error(self, tmp_path, capsys):
        bogus = tmp_path / "notes.txt"
        bogus.write_text("hello", encoding="utf-8")

        assert main(["--screenshot", str(bogus), "--dry-run", "-q"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_descriptor_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.json"), "--dry-run"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_fetch_avatar(self, capsys):
        lookup = MagicMock()
        lookup.lookup.return_value = {"logo_ref": "https://avatars/octocat.png", "is_loading": False}

        with patch("readmegen.cli.get_profile_lookup", return_value=lookup):
            exit_code = main(["--author", "octocat", "--fetch-avatar", "--dry-run", "-q"])

        assert exit_code == 0
        lookup.lookup.assert_called_once_with("octocat")
        assert '<img src="https://avatars/octocat.png" width="150" />' in capsys.readouterr().out

    def test_failed_avatar_keeps_placeholder(self, capsys):
        lookup = MagicMock()
        lookup.lookup.return_value = {"is_loading": False}

        with patch("readmegen.cli.get_profile_lookup", return_value=lookup):
            exit_code = main(["--author", "ghost", "--fetch-avatar", "--dry-run", "-q"])

        assert exit_code == 0
        assert PLACEHOLDER_LOGO_URI in capsys.readouterr().out

    def test_verbose_progress(self, descriptor_file, capsys):
        main([str(descriptor_file), "--dry-run", "-v"])
        err = capsys.readouterr().err
        assert "[readmegen] Rendering README..." in err
        assert "Links: 1" in err
