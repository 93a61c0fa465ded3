import unittest

from gdrivefs.config import PathMode
from gdrivefs.paths import (
    PathSplitter,
    dirname,
    join_path,
    normalize_path,
    split_file_extension,
    split_path,
)


class TestSplitPath(unittest.TestCase):
    def test_root_paths(self) -> None:
        self.assertEqual(split_path("", "ROOT"), ("ROOT", "ROOT"))
        self.assertEqual(split_path("/", "ROOT"), ("ROOT", "ROOT"))

    def test_top_level_leaf_gets_root_parent(self) -> None:
        self.assertEqual(split_path("file.txt", "ROOT"), ("ROOT", "file.txt"))
        self.assertEqual(split_path("/file.txt", "ROOT"), ("ROOT", "file.txt"))

    def test_immediate_parent_mode(self) -> None:
        self.assertEqual(split_path("A/B/C", "ROOT"), ("B", "C"))

    def test_full_parent_mode(self) -> None:
        self.assertEqual(
            split_path("docs/2024/report.pdf", "ROOT", immediate_parent=False),
            ("docs/2024", "report.pdf"),
        )

    def test_empty_segments_are_ignored(self) -> None:
        self.assertEqual(split_path("//A///B/", "ROOT"), ("A", "B"))

    def test_split_then_join_round_trips(self) -> None:
        for path in ("a", "a/b", "a/b/c/d.txt"):
            parent, leaf = split_path(path, "ROOT", immediate_parent=False)
            rebuilt = leaf if parent == "ROOT" else f"{parent}/{leaf}"
            self.assertEqual(rebuilt, path)


class TestPathHelpers(unittest.TestCase):
    def test_normalize_and_join(self) -> None:
        self.assertEqual(normalize_path("/a//b/"), "a/b")
        self.assertEqual(join_path("", "x"), "x")
        self.assertEqual(join_path("a/", "x"), "a/x")

    def test_dirname(self) -> None:
        self.assertEqual(dirname("a/b/c"), "a/b")
        self.assertEqual(dirname("a"), "")
        self.assertEqual(dirname(""), "")

    def test_split_file_extension(self) -> None:
        self.assertEqual(split_file_extension("report.pdf"), ("report", "pdf"))
        self.assertEqual(split_file_extension("archive.tar.gz"), ("archive.tar", "gz"))
        self.assertEqual(split_file_extension("README"), ("README", ""))


class TestPathSplitter(unittest.TestCase):
    def test_mode_selects_parent_key(self) -> None:
        by_id = PathSplitter("ROOT", PathMode.ID)
        by_name = PathSplitter("ROOT", PathMode.NAME)
        self.assertEqual(by_id.split("A/B/C"), ("B", "C"))
        self.assertEqual(by_name.split("A/B/C"), ("A/B", "C"))

    def test_is_root(self) -> None:
        splitter = PathSplitter("ROOT")
        self.assertTrue(splitter.is_root(""))
        self.assertTrue(splitter.is_root("/"))
        self.assertTrue(splitter.is_root("ROOT"))
        self.assertFalse(splitter.is_root("A"))


if __name__ == "__main__":
    unittest.main()
