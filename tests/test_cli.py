"""Tests for the command line interface."""

import json
from pathlib import Path

import pytest

from cli import main, parse_args


@pytest.fixture
def notes(tmp_path):
    (tmp_path / "a.md").write_text("[b](b.md)\n[x](x.md)\n[site](https://example.com)", encoding="utf-8")
    (tmp_path / "b.md").write_text("[[a]]", encoding="utf-8")
    return tmp_path


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Flags that can come from a config file default to None."""
        parsed = parse_args([])

        assert parsed.root == "."
        assert parsed.format is None
        assert parsed.keep_duplicates is None
        assert parsed.watch is False

    def test_verbose_and_quiet_exclusive(self):
        """-v and -q cannot be combined."""
        with pytest.raises(SystemExit):
            parse_args(["-v", "-q"])


class TestMain:
    """Tests for running the CLI."""

    def test_json_to_stdout(self, notes, capsys):
        """JSON output lists every node and edge."""
        assert main([str(notes), "-f", "json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert [(n["label"], n["color"]) for n in data["nodes"]] == [
            ("a", "green"),
            ("b", "green"),
            ("x", "gray"),
            ("example.com", "yellow"),
        ]
        assert len(data["edges"]) == 4

    def test_output_file(self, notes, tmp_path):
        """Output can be written to a file."""
        target = tmp_path / "out" / "graph.mmd"
        target.parent.mkdir()

        assert main([str(notes), "-f", "mermaid", "-o", str(target)]) == 0

        assert target.read_text(encoding="utf-8").startswith("flowchart LR")

    def test_ascii_default(self, notes, capsys):
        """ASCII trees are the default output."""
        assert main([str(notes), "--ignore-remote"]) == 0

        out = capsys.readouterr().out
        assert "x [MISSING]" in out
        assert "[REMOTE]" not in out

    def test_config_file_format(self, notes, capsys):
        """The format can come from the root config file."""
        (notes / ".mapdown.yaml").write_text("format: json\n", encoding="utf-8")

        assert main([str(notes), "--ignore-missing"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert "x" not in [n["label"] for n in data["nodes"]]

    def test_flag_overrides_config(self, notes, capsys):
        """Command line flags win over the config file."""
        (notes / ".mapdown.yaml").write_text("format: json\n", encoding="utf-8")

        assert main([str(notes), "-f", "mermaid"]) == 0

        assert capsys.readouterr().out.startswith("flowchart")

    def test_bad_config(self, notes, capsys):
        """An invalid config file fails cleanly."""
        (notes / ".mapdown.yaml").write_text("format: svg\n", encoding="utf-8")

        assert main([str(notes)]) == 1
        assert "format" in capsys.readouterr().err

    def test_not_a_directory(self, tmp_path, capsys):
        """A root that is not a directory is rejected."""
        assert main([str(tmp_path / "missing")]) == 1
        assert "is not a directory" in capsys.readouterr().err
