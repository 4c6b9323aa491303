"""Tests for writing HTML and file layouts."""

from __future__ import annotations

from pathlib import Path

import pytest

from markuptree import ConfigurationError, MarkupTree, WriteError
from markuptree.writer import write_entries


def write_doc(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def identity(content, meta=None):
    return content


class TestWrite:
    """Test MarkupTree.write."""

    def test_end_to_end_html(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A post lands at <out>/<posts>/<slug>/index.html."""
        write_doc(tmp_path / "posts" / "hello.md", "---\ntitle: Hi\n---\nWorld")
        monkeypatch.chdir(tmp_path)
        tree = MarkupTree("posts", out_dir="out", posts_dir="blog")

        written = tree.write("html", identity)

        target = tmp_path / "out" / "blog" / "hello" / "index.html"
        assert target.read_text(encoding="utf-8") == "World"
        assert written == [target.resolve()]
        assert tree.tree()[0].metadata == {"title": "Hi"}

    def test_html_default_mode_without_template(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """String content is written verbatim when no template is given."""
        write_doc(tmp_path / "src" / "a.md", "<p>plain</p>")
        write_doc(tmp_path / "src" / "nested" / "b.md", "<p>nested</p>")
        monkeypatch.chdir(tmp_path)

        MarkupTree("src", out_dir="site").write()

        assert (tmp_path / "site" / "a" / "index.html").read_text(encoding="utf-8") == "<p>plain</p>"
        assert (tmp_path / "site" / "nested" / "b" / "index.html").read_text(encoding="utf-8") == "<p>nested</p>"

    def test_files_mode(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """The template receives parsed content and metadata."""
        write_doc(tmp_path / "src" / "guides" / "intro.md", "---\ntitle: Intro\n---\nbody")
        monkeypatch.chdir(tmp_path)
        tree = MarkupTree("src", out_dir="app", posts_dir="routes", out_extension=".tsx")

        tree.write("files", lambda content, meta: f"// {meta['title']}\n{content}")

        target = tmp_path / "app" / "routes" / "guides" / "intro.tsx"
        assert target.read_text(encoding="utf-8") == "// Intro\nbody"

    def test_overwrites_existing_files(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        write_doc(tmp_path / "src" / "a.md", "new")
        target = tmp_path / "out" / "a" / "index.html"
        write_doc(target, "old")
        monkeypatch.chdir(tmp_path)

        MarkupTree("src", out_dir="out").write()

        assert target.read_text(encoding="utf-8") == "new"

    def test_files_mode_requires_template(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Fails before any directory is created."""
        write_doc(tmp_path / "src" / "a.md", "body")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigurationError):
            MarkupTree("src", out_dir="out").write("files")

        assert not (tmp_path / "out").exists()

    def test_html_structured_content_requires_template(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Structured content with no template fails before any directory is created."""
        write_doc(tmp_path / "src" / "a.md", "plain")
        write_doc(tmp_path / "src" / "b.md", "structured")
        monkeypatch.chdir(tmp_path)

        def parser(body: str):
            return body if body == "plain" else {"type": "root", "children": [body]}

        with pytest.raises(ConfigurationError):
            MarkupTree("src", parser, out_dir="out").write("html")

        assert not (tmp_path / "out").exists()

    def test_html_structured_content_with_template(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        write_doc(tmp_path / "src" / "a.md", "text")
        monkeypatch.chdir(tmp_path)
        tree = MarkupTree("src", lambda body: {"children": [body]}, out_dir="out")

        tree.write("html", lambda content, meta: "|".join(content["children"]))

        assert (tmp_path / "out" / "a" / "index.html").read_text(encoding="utf-8") == "text"

    def test_unknown_mode(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            MarkupTree(tmp_path).write("pdf", identity)

    def test_unknown_dispatch(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            MarkupTree(tmp_path).write("html", identity, dispatch="later")

    @pytest.mark.parametrize("dispatch", ["concurrent", "sequential"])
    def test_failure_does_not_stop_other_records(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, dispatch: str
    ) -> None:
        """Every record is attempted; failures are reported together."""
        write_doc(tmp_path / "src" / "a.md", "a")
        write_doc(tmp_path / "src" / "sub" / "b.md", "b")
        write_doc(tmp_path / "src" / "c.md", "c")
        write_doc(tmp_path / "out" / "sub", "a file where a directory should be")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(WriteError) as excinfo:
            MarkupTree("src", out_dir="out", workers=4).write("html", identity, dispatch=dispatch)

        assert [path.name for path, _ in excinfo.value.failures] == ["index.html"]
        assert excinfo.value.failures[0][0].parent.name == "b"
        assert isinstance(excinfo.value.failures[0][1], OSError)
        assert (tmp_path / "out" / "a" / "index.html").read_text(encoding="utf-8") == "a"
        assert (tmp_path / "out" / "c" / "index.html").read_text(encoding="utf-8") == "c"

    def test_template_errors_are_collected(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        write_doc(tmp_path / "src" / "good.md", "ok")
        write_doc(tmp_path / "src" / "bad.md", "boom")
        monkeypatch.chdir(tmp_path)

        def template(content, meta):
            if content == "boom":
                raise RuntimeError("template failed")
            return content

        with pytest.raises(WriteError) as excinfo:
            MarkupTree("src", out_dir="out").write("html", template, dispatch="sequential")

        assert len(excinfo.value.failures) == 1
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert (tmp_path / "out" / "good" / "index.html").exists()


class TestWriteEntries:
    """Test write_entries directly."""

    def test_empty(self) -> None:
        assert write_entries([]) == []

    def test_returns_paths_in_tree_order(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("x.md", "y.md", "z.md"):
            write_doc(tmp_path / "src" / name, name)
        monkeypatch.chdir(tmp_path)
        entries = MarkupTree("src", out_dir="out").files_tree()

        written = write_entries(entries, identity, workers=3)

        assert written == [entry.files_output.out_file_path for entry in entries]
        assert all(path.exists() for path in written)
