import os

import pytest

from mdviewer.models import FileNode, NodeKind
from mdviewer.tree import (
    DiscoveryError,
    build_tree,
    discover_markdown_files,
    file_node,
    flatten_files,
    insert_path,
    new_root,
)


def names(node: FileNode) -> list[str]:
    return [child.name for child in node.children]


class TestInsertPath:
    def test_builds_nested_structure(self, tmp_path):
        root = new_root(tmp_path / "ws")
        for rel in ["a.md", "x/b.md", "x/y/c.md"]:
            insert_path(root, rel)

        assert root.name == "ws"
        assert root.path == ""
        assert root.kind is NodeKind.DIRECTORY
        assert names(root) == ["a.md", "x"]

        x = root.find_child("x")
        assert x.kind is NodeKind.DIRECTORY
        assert x.path == "x"
        assert names(x) == ["b.md", "y"]

        y = x.find_child("y")
        assert y.path == "x/y"
        assert names(y) == ["c.md"]

        c = y.find_child("c.md")
        assert c.kind is NodeKind.FILE
        assert c.path == "x/y/c.md"
        assert c.children is None

    def test_insertion_is_idempotent(self, tmp_path):
        root = new_root(tmp_path)
        insert_path(root, "x/b.md")
        insert_path(root, "x/b.md")

        assert names(root) == ["x"]
        assert names(root.find_child("x")) == ["b.md"]

    def test_sibling_order_is_insertion_order(self, tmp_path):
        root = new_root(tmp_path)
        for rel in ["z.md", "a.md", "m/n.md"]:
            insert_path(root, rel)
        assert names(root) == ["z.md", "a.md", "m"]

    def test_child_paths_extend_parent_path(self, tmp_path):
        root = new_root(tmp_path)
        for rel in ["p/q/r/s.md", "p/t.md"]:
            insert_path(root, rel)

        def check(node):
            for child in node.children or []:
                expected = child.name if node.path == "" else f"{node.path}/{child.name}"
                assert child.path == expected
                check(child)

        check(root)


class TestDiscovery:
    def test_finds_markdown_only(self, workspace):
        found = discover_markdown_files(workspace)
        assert found == ["a.md", "x/b.md", "x/y/c.md"]

    def test_markdown_extension_and_case(self, tmp_path):
        (tmp_path / "long.markdown").write_text("x")
        (tmp_path / "UPPER.MD").write_text("x")
        (tmp_path / "notes.md.bak").write_text("x")
        assert discover_markdown_files(tmp_path) == ["long.markdown"]

    def test_skips_hidden_files(self, tmp_path):
        (tmp_path / ".draft.md").write_text("x")
        (tmp_path / "visible.md").write_text("x")
        assert discover_markdown_files(tmp_path) == ["visible.md"]

    def test_directory_named_like_markdown_is_not_a_file(self, tmp_path):
        (tmp_path / "folder.md").mkdir()
        (tmp_path / "folder.md" / "inner.md").write_text("x")
        assert discover_markdown_files(tmp_path) == ["folder.md/inner.md"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlink_cycle_terminates(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "doc.md").write_text("x")
        try:
            os.symlink(tmp_path, tmp_path / "sub" / "loop", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks here")
        assert discover_markdown_files(tmp_path) == ["sub/doc.md"]

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(DiscoveryError):
            discover_markdown_files(tmp_path / "missing")

    def test_file_root_raises(self, tmp_path):
        target = tmp_path / "file.md"
        target.write_text("x")
        with pytest.raises(DiscoveryError):
            discover_markdown_files(target)


class TestBuildTree:
    def test_workspace_tree(self, workspace):
        tree = build_tree(workspace)
        assert tree.name == "docs"
        assert names(tree) == ["a.md", "x"]
        assert names(tree.find_child("x")) == ["b.md", "y"]

    def test_empty_workspace(self, tmp_path):
        tree = build_tree(tmp_path)
        assert tree.kind is NodeKind.DIRECTORY
        assert tree.children == []

    def test_serialization_omits_file_children(self, workspace):
        data = build_tree(workspace).model_dump(mode="json", exclude_none=True)
        a = data["children"][0]
        assert a == {"name": "a.md", "path": "a.md", "kind": "file"}
        assert data["children"][1]["kind"] == "directory"

    def test_flatten_files(self, workspace):
        assert [n.path for n in flatten_files(build_tree(workspace))] == ["a.md", "x/b.md", "x/y/c.md"]

    def test_file_node(self):
        node = file_node("x/y/c.md")
        assert node.name == "c.md"
        assert node.kind is NodeKind.FILE
        assert node.children is None
