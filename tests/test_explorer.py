"""Tests for note loading and explorer ordering."""
from __future__ import annotations

from vault.documents import Document, load_vault, split_frontmatter
from vault.explorer import ExplorerNode, build_tree, sort_nodes


# ─────────────────────────────────────────────────────────
# Front matter
# ─────────────────────────────────────────────────────────


class TestFrontmatter:
    def test_split(self):
        fm, body = split_frontmatter("---\ntitle: Harbour\n---\nBody\n")
        assert fm == {"title": "Harbour"}
        assert body == "Body\n"

    def test_no_block(self):
        assert split_frontmatter("Just text") == ({}, "Just text")

    def test_invalid_yaml(self):
        fm, body = split_frontmatter("---\ntitle: [oops\n---\nBody")
        assert fm == {}
        assert body == "Body"

    def test_out_of_range_date(self):
        fm, body = split_frontmatter("---\ncreated: 2020-13-45\n---\nBody")
        assert fm == {}
        assert body == "Body"

    def test_not_a_mapping(self):
        fm, _ = split_frontmatter("---\n- a\n- b\n---\n")
        assert fm == {}

    def test_byte_order_mark(self):
        fm, _ = split_frontmatter("\ufeff---\ntitle: X\n---\n")
        assert fm == {"title": "X"}

    def test_unterminated_block(self):
        text = "---\ntitle: X\nno end"
        assert split_frontmatter(text) == ({}, text)


class TestLoadVault:
    def test_documents_and_assets(self, write_note, tmp_path):
        write_note("index.md", "---\ntitle: Home\n---\n")
        write_note("places/Harbour.md", "Boats")
        write_note("assets/town.png", "not really a png")
        write_note(".obsidian/config.md", "hidden")

        documents, assets = load_vault(tmp_path)
        assert [d.slug for d in documents] == ["index", "places/Harbour"]
        assert documents[0].title == "Home"
        assert documents[1].title == "Harbour"  # file stem
        assert assets == ["assets/town.png"]


# ─────────────────────────────────────────────────────────
# Ordering
# ─────────────────────────────────────────────────────────


def _file(name, priority=None):
    fm = {"priority": priority} if priority is not None else {}
    return ExplorerNode(name=name, display_name=name, slug=name, frontmatter=fm)


def _folder(name, priority=None):
    node = _file(name, priority)
    node.is_folder = True
    return node


class TestOrdering:
    def test_natural_case_insensitive(self):
        nodes = sort_nodes([_file("day 10"), _file("Day 2"), _file("day 1")])
        assert [n.name for n in nodes] == ["day 1", "Day 2", "day 10"]

    def test_folders_first(self):
        nodes = sort_nodes([_file("a"), _folder("z")])
        assert [n.name for n in nodes] == ["z", "a"]

    def test_priority_wins(self):
        nodes = sort_nodes([_folder("folder"), _file("b", 1), _file("a"), _file("c", 5)])
        assert [n.name for n in nodes] == ["c", "b", "folder", "a"]

    def test_non_numeric_priority_ignored(self):
        nodes = sort_nodes([_file("b", "high"), _file("a")])
        assert [n.name for n in nodes] == ["a", "b"]


class TestBuildTree:
    def test_folder_index_names_its_folder(self):
        docs = [
            Document(slug="places/index", title="All Places", frontmatter={"priority": 1}),
            Document(slug="places/harbour", title="Harbour"),
            Document(slug="about", title="About"),
            Document(slug="index", title="Home"),
        ]
        tree = build_tree(docs)
        assert [n.display_name for n in tree] == ["All Places", "About", "Home"]
        places = tree[0]
        assert places.is_folder
        assert places.slug == "places/index"
        assert [c.slug for c in places.children] == ["places/harbour"]
