"""Tests for scanner module."""

import os
import tempfile
from pathlib import Path

import pytest

from graph.model import Node, NodeColor
from scanner.discovery import find_documents, iter_documents
from scanner.errors import InvalidLinkError, ScanError, UnknownLabelError
from scanner.links import Link, LinkKind, extract_links, extract_targets
from scanner.resolver import (
    NodeRegistry,
    TargetKind,
    classify_target,
    document_label,
    transition,
)


class TestDiscovery:
    """Tests for document discovery."""

    def test_depth_first_sorted(self):
        """Subdirectories are walked where they sort among their siblings."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "b").mkdir()
            (root / "a.md").touch()
            (root / "b" / "inner.md").touch()
            (root / "c.md").touch()
            (root / "notes.txt").touch()

            found = [p.relative_to(root).as_posix() for p in iter_documents(root)]

            assert found == ["a.md", "b/inner.md", "c.md"]

    def test_returns_absolute_paths(self):
        """Documents are yielded as absolute paths."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "a.md").touch()
            found = find_documents(Path(tmpdir))
            assert len(found) == 1
            assert found[0].is_absolute()

    def test_extension_is_configurable(self):
        """Only the recognized extension is scanned."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "a.md").touch()
            (root / "b.markdown").touch()

            assert [p.name for p in iter_documents(root, extension=".markdown")] == ["b.markdown"]

    def test_exclude_dirs_and_max_depth(self):
        """Excluded directories and deep documents are skipped."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "node_modules").mkdir()
            (root / "node_modules" / "readme.md").touch()
            (root / "deep" / "deeper").mkdir(parents=True)
            (root / "deep" / "one.md").touch()
            (root / "deep" / "deeper" / "two.md").touch()

            names = [p.name for p in iter_documents(root, exclude_dirs={"node_modules"})]
            assert names == ["two.md", "one.md"]

            names = [p.name for p in iter_documents(root, exclude_dirs={"node_modules"}, max_depth=1)]
            assert names == ["one.md"]

    def test_missing_root_is_fatal(self):
        """Scanning a nonexistent root raises."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ScanError):
                find_documents(Path(tmpdir) / "nope")

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_dangling_entry_is_fatal(self):
        """An entry that cannot be stat'ed aborts the scan."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "a.md").touch()
            os.symlink(root / "gone", root / "broken.md")

            with pytest.raises(ScanError) as info:
                find_documents(root)
            assert info.value.path == root / "broken.md"


class TestLinkExtraction:
    """Tests for link extraction."""

    def test_inline_link(self):
        """Inline links yield their parenthesized target."""
        assert list(extract_links("see [b](b.md)")) == [Link(LinkKind.INLINE, "b.md", 4)]

    def test_wiki_link(self):
        """Double-bracket links yield their contents verbatim."""
        assert list(extract_links("[[Some Note]]")) == [Link(LinkKind.WIKI, "Some Note", 0)]

    def test_mixed_in_document_order(self):
        """Both syntaxes are found in one left-to-right pass."""
        text = "[[first]]\n[second](two.md) and [[third]]\n[site](https://example.com)"
        assert list(extract_targets(text)) == ["first", "two.md", "third", "https://example.com"]

    def test_empty_targets_skipped(self):
        """Empty captures are not links."""
        assert list(extract_links("[nothing]() and [[]]")) == []

    def test_matches_do_not_span_lines(self):
        """A bracket on one line and a target on the next are not a link."""
        assert list(extract_targets("[text]\n(target.md)")) == []

    def test_plain_brackets_ignored(self):
        """Text without link syntax yields nothing."""
        assert list(extract_targets("just [brackets] and (parens)")) == []

    def test_inline_match_starts_at_leftmost_bracket(self):
        """An inline link opening earlier on the line swallows a wiki link."""
        assert list(extract_links("[[a]] then [b](b.md)")) == [Link(LinkKind.INLINE, "b.md", 0)]

    def test_restartable(self):
        """Extracting twice from the same text gives the same sequence."""
        text = "[a](a.md) [[b]] [c](https://c.example)"
        assert list(extract_links(text)) == list(extract_links(text))

    def test_lazy(self):
        """Links are produced on demand."""
        links = extract_links("[[a]] [[b]]")
        assert next(links).target == "a"
        assert next(links).target == "b"
        with pytest.raises(StopIteration):
            next(links)


class TestClassification:
    """Tests for link target classification."""

    def test_document_label(self):
        """Labels are lowercased base names without extension."""
        assert document_label("/notes/Sub/README.md") == "readme"
        assert document_label("Some Note") == "some note"
        assert document_label("archive.tar.md") == "archive.tar"

    def test_document_target_resolved_from_source_dir(self):
        """Document links are resolved against the linking document."""
        source = Path("/notes/sub/a.md")
        target = classify_target("../other/B.md", source)

        assert target.kind is TargetKind.DOCUMENT
        assert target.label == "b"
        assert target.path == os.path.normpath("/notes/other/B.md")

    def test_external_target(self):
        """URLs are labelled by hostname."""
        target = classify_target("https://Example.com/page?q=1", Path("/notes/a.md"))

        assert target.kind is TargetKind.EXTERNAL
        assert target.label == "example.com"
        assert target.path == "example.com"

    def test_local_target(self):
        """Anything else is a bare local label."""
        target = classify_target("Other Note", Path("/notes/a.md"))

        assert target.kind is TargetKind.LOCAL
        assert target.label == "other note"
        assert target.path is None

    def test_extension_checked_before_url(self):
        """A URL ending in the document extension is treated as a document."""
        target = classify_target("https://example.com/doc.md", Path("/notes/a.md"))
        assert target.kind is TargetKind.DOCUMENT
        assert target.label == "doc"

    @pytest.mark.parametrize("raw", ["http://", "https:///path", "httpfoo", "http://[::1"])
    def test_invalid_urls(self, raw):
        """Malformed URLs are rejected."""
        with pytest.raises(InvalidLinkError):
            classify_target(raw, Path("/notes/a.md"))


class TestTransition:
    """Tests for the node state transition."""

    def test_creates_node(self):
        """An unknown label gets a new node."""
        node = transition(None, 3, "x", None, NodeColor.GRAY)
        assert node == Node(3, "x", NodeColor.GRAY, None)

    def test_upgrades_placeholder(self):
        """A placeholder takes the supplied path and color and keeps its id."""
        placeholder = Node(1, "example.com", NodeColor.GRAY)
        node = transition(placeholder, 9, "example.com", "example.com", NodeColor.YELLOW)
        assert node == Node(1, "example.com", NodeColor.YELLOW, "example.com")

    def test_placeholder_without_path_unchanged(self):
        """Another bare reference leaves a placeholder alone."""
        placeholder = Node(1, "x", NodeColor.GRAY)
        assert transition(placeholder, 9, "x", None, NodeColor.GREEN) is placeholder

    def test_resolved_node_never_overwritten(self):
        """The first resolved identity wins."""
        document = Node(0, "a", NodeColor.GREEN, "/notes/a.md")
        assert transition(document, 9, "a", "a", NodeColor.YELLOW) is document


class TestNodeRegistry:
    """Tests for NodeRegistry."""

    def test_dense_ids(self):
        """Ids are allocated from 0 in order of first reference."""
        registry = NodeRegistry()
        assert registry.resolve("a", "/a.md", NodeColor.GREEN) == 0
        assert registry.resolve("b") == 1
        assert registry.resolve("c") == 2
        assert [n.id for n in registry.nodes()] == [0, 1, 2]

    def test_case_insensitive_merge(self):
        """Labels differing only in case are one node."""
        registry = NodeRegistry()
        first = registry.resolve("Readme", "/x/Readme.md", NodeColor.GREEN)
        second = registry.resolve("README", "/y/README.md", NodeColor.GREEN)

        assert first == second
        assert registry.nodes()[0].file_path == "/x/Readme.md"
        assert len(registry) == 1

    def test_upgrade_keeps_id(self):
        """A placeholder upgraded later keeps the id it was given."""
        registry = NodeRegistry()
        registry.resolve("a", "/a.md", NodeColor.GREEN)
        placeholder_id = registry.resolve("example.com")
        assert registry.color_of("example.com") is NodeColor.GRAY

        assert registry.resolve("example.com", "example.com", NodeColor.YELLOW) == placeholder_id
        assert registry.color_of("example.com") is NodeColor.YELLOW
        assert registry.nodes()[placeholder_id].file_path == "example.com"

    def test_color_of_unknown_label(self):
        """Looking up the color of an unseen label is an error."""
        with pytest.raises(UnknownLabelError):
            NodeRegistry().color_of("ghost")

    def test_contains(self):
        """Membership is by label, ignoring case."""
        registry = NodeRegistry()
        registry.resolve("A")
        assert "a" in registry
        assert "b" not in registry
