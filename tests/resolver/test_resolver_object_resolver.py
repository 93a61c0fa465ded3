import unittest

from fakes import ROOT_ID, FakeDriveController

from gdrivefs.cache import MISSING, ObjectCache
from gdrivefs.config import AdapterOptions, PathMode
from gdrivefs.errors import CreateDirectoryError, PermissionError
from gdrivefs.paths import PathSplitter
from gdrivefs.resolver import ObjectResolver


def _resolver(mode: PathMode = PathMode.ID, *, use_has_dir: bool = False):
    fake = FakeDriveController(AdapterOptions(path_mode=mode))
    cache = ObjectCache()
    resolver = ObjectResolver(fake, cache, PathSplitter("root", mode), use_has_dir=use_has_dir)
    return fake, cache, resolver


class TestResolveIdMode(unittest.TestCase):
    def test_root_is_fetched_once(self) -> None:
        fake, _, resolver = _resolver()

        self.assertEqual(resolver.resolve("").id, ROOT_ID)
        self.assertEqual(resolver.resolve("/").id, ROOT_ID)
        self.assertEqual(fake.calls.count("get"), 1)

    def test_resolve_by_id_path(self) -> None:
        fake, cache, resolver = _resolver()
        folder = fake.add_folder("docs")
        file = fake.add_file("a.txt", b"x", folder.id)

        obj = resolver.resolve(f"{folder.id}/{file.id}")

        self.assertEqual(obj.id, file.id)
        self.assertIs(cache.get_by_name((folder.id, file.id)), obj)

    def test_second_resolve_is_served_from_cache(self) -> None:
        fake, _, resolver = _resolver()
        file = fake.add_file("a.txt")

        resolver.resolve(file.id)
        calls = fake.remote_calls()
        resolver.resolve(file.id)

        self.assertEqual(fake.remote_calls(), calls)

    def test_unknown_leaf_falls_back_to_name_lookup(self) -> None:
        fake, _, resolver = _resolver()
        folder = fake.add_folder("docs")
        file = fake.add_file("report.txt", b"x", folder.id)

        obj = resolver.resolve(f"{folder.id}/report.txt")

        self.assertEqual(obj.id, file.id)
        self.assertIn("find_child", fake.calls)

    def test_miss_is_cached_as_tombstone(self) -> None:
        fake, cache, resolver = _resolver()

        self.assertIsNone(resolver.resolve("missing.txt"))
        self.assertIs(cache.get_by_name((ROOT_ID, "missing.txt")), MISSING)

        calls = fake.remote_calls()
        self.assertIsNone(resolver.resolve("missing.txt"))
        self.assertEqual(fake.remote_calls(), calls)

    def test_trashed_object_is_not_resolved(self) -> None:
        fake, _, resolver = _resolver()
        file = fake.add_file("old.txt")
        fake.objects[file.id].trashed = True

        self.assertIsNone(resolver.resolve(file.id))

    def test_object_under_another_parent_is_not_resolved(self) -> None:
        fake, _, resolver = _resolver()
        a = fake.add_folder("a")
        b = fake.add_folder("b")
        file = fake.add_file("f.txt", b"", a.id)

        self.assertIsNotNone(resolver.resolve(f"{a.id}/{file.id}"))
        self.assertIsNone(resolver.resolve(f"{b.id}/{file.id}"))

    def test_duplicate_names_resolve_to_first_listed(self) -> None:
        fake, _, resolver = _resolver()
        first = fake.add_file("dup.txt", b"1")
        fake.add_file("dup.txt", b"2")

        self.assertEqual(resolver.resolve("dup.txt").id, first.id)

    def test_split_and_rejoin_resolves_the_same_object(self) -> None:
        fake, _, resolver = _resolver()
        outer = fake.add_folder("outer")
        inner = fake.add_folder("inner", outer.id)
        file = fake.add_file("f.txt", b"", inner.id)
        path = f"/{outer.id}//{inner.id}/{file.id}/"

        parent_key, leaf = resolver.name_key(path)
        rejoined = f"{outer.id}/{parent_key}/{leaf}"

        self.assertEqual(resolver.resolve(path).id, resolver.resolve(rejoined).id)

    def test_other_errors_propagate(self) -> None:
        fake, _, resolver = _resolver()
        fake.failures["get"] = PermissionError("denied")

        with self.assertRaises(PermissionError):
            resolver.resolve("anything")


class TestResolveNameMode(unittest.TestCase):
    def test_resolve_nested_names(self) -> None:
        fake, cache, resolver = _resolver(PathMode.NAME)
        docs = fake.add_folder("docs")
        sub = fake.add_folder("2024", docs.id)
        file = fake.add_file("plan.md", b"", sub.id)

        obj = resolver.resolve("docs/2024/plan.md")

        self.assertEqual(obj.id, file.id)
        self.assertIs(cache.get_by_name(("docs/2024", "plan.md")), obj)
        self.assertNotIn("get", fake.calls[1:])

    def test_missing_parent_resolves_to_none(self) -> None:
        _, _, resolver = _resolver(PathMode.NAME)
        self.assertIsNone(resolver.resolve("nope/file.txt"))


class TestEnsureDirectory(unittest.TestCase):
    def test_creates_missing_ancestors_once(self) -> None:
        fake, _, resolver = _resolver(PathMode.NAME)

        first = resolver.ensure_directory("a/b/c")
        second = resolver.ensure_directory("a/b/c")

        self.assertEqual(first, second)
        self.assertEqual(fake.calls.count("create_folder"), 3)
        c = fake.objects[first]
        b = fake.objects[c.parents[0]]
        a = fake.objects[b.parents[0]]
        self.assertEqual((a.name, b.name, c.name), ("a", "b", "c"))
        self.assertEqual(a.parents, [ROOT_ID])

    def test_existing_folder_is_reused(self) -> None:
        fake, _, resolver = _resolver(PathMode.NAME)
        docs = fake.add_folder("docs")

        self.assertEqual(resolver.ensure_directory("docs"), docs.id)
        self.assertNotIn("create_folder", fake.calls)

    def test_root_is_never_created(self) -> None:
        fake, _, resolver = _resolver()
        self.assertEqual(resolver.ensure_directory("/"), ROOT_ID)
        self.assertNotIn("create_folder", fake.calls)

    def test_file_in_the_way(self) -> None:
        fake, _, resolver = _resolver(PathMode.NAME)
        fake.add_file("docs")

        with self.assertRaises(CreateDirectoryError):
            resolver.ensure_directory("docs/sub")

    def test_created_folder_resolves_by_name_in_id_mode(self) -> None:
        fake, _, resolver = _resolver()

        folder_id = resolver.ensure_directory("new-folder")
        calls = fake.remote_calls()

        self.assertEqual(resolver.resolve("new-folder").id, folder_id)
        self.assertEqual(fake.remote_calls(), calls)

    def test_same_named_folders_under_named_parents_stay_apart(self) -> None:
        fake, cache, resolver = _resolver()

        a_x = resolver.ensure_directory("a/x")
        b_x = resolver.ensure_directory("b/x")
        resolver.ensure_directory("a/x/sub")

        self.assertNotEqual(a_x, b_x)
        self.assertIsNone(resolver.resolve("b/x/sub"))
        self.assertIs(cache.get_by_name((b_x, "sub")), MISSING)
        self.assertEqual(resolver.resolve("a/x/sub").parents, [a_x])

    def test_missing_parent_records_no_tombstone(self) -> None:
        _, cache, resolver = _resolver()

        self.assertIsNone(resolver.cache_key("nope/file.txt"))
        self.assertIsNone(resolver.resolve("nope/file.txt"))
        self.assertIsNone(cache.get_by_name(("nope", "file.txt")))


class TestHasDir(unittest.TestCase):
    def test_check_has_children_fills_flag(self) -> None:
        fake, cache, resolver = _resolver(use_has_dir=True)
        parent = fake.add_folder("parent")
        fake.add_folder("child", parent.id)

        resolver.resolve(parent.id, check_has_children=True)

        self.assertTrue(cache.get_has_dir(parent.id))

    def test_fill_has_dirs_uses_one_batch(self) -> None:
        fake, cache, resolver = _resolver(use_has_dir=True)
        with_sub = fake.add_folder("with-sub")
        fake.add_folder("sub", with_sub.id)
        empty = fake.add_folder("empty")
        file = fake.add_file("f.txt")

        resolver.fill_has_dirs([fake.get(with_sub.id), fake.get(empty.id), fake.get(file.id)])

        self.assertEqual(fake.calls.count("batch"), 1)
        self.assertTrue(cache.get_has_dir(with_sub.id))
        self.assertFalse(cache.get_has_dir(empty.id))
        self.assertIsNone(cache.get_has_dir(file.id))


if __name__ == "__main__":
    unittest.main()
