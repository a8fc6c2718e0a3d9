import unittest

from drimefs.cache import PathCache
from drimefs.models import FILE, FOLDER, Entry


def _folder(entry_id: int, name: str, parent_id=None) -> Entry:
    return Entry(id=entry_id, name=name, kind=FOLDER, parent_id=parent_id)


def _file(entry_id: int, name: str, parent_id=None) -> Entry:
    return Entry(id=entry_id, name=name, kind=FILE, parent_id=parent_id)


class TestPathCache(unittest.TestCase):
    def setUp(self) -> None:
        self.cache = PathCache()
        self.cache.put("a", _folder(1, "a"))
        self.cache.put("a/b", _folder(2, "b", 1))
        self.cache.put("a/b/c.txt", _file(3, "c.txt", 2))
        self.cache.put("z", _folder(9, "z"))

    def test_lookup(self) -> None:
        self.assertEqual(self.cache.lookup("/a/b/").id, 2)
        self.assertEqual(self.cache.lookup_id("a/b/c.txt"), 3)
        self.assertEqual(self.cache.get_entry(3).name, "c.txt")
        self.assertIsNone(self.cache.lookup("a/x"))
        self.assertEqual(len(self.cache), 4)

    def test_root_is_never_stored(self) -> None:
        self.cache.put("", Entry.root())
        self.cache.put("q", Entry.root())
        self.assertIsNone(self.cache.lookup(""))
        self.assertIsNone(self.cache.lookup("q"))
        self.assertEqual(len(self.cache), 4)

    def test_forget_path_drops_subtree(self) -> None:
        self.cache.forget_path("a/b")
        self.assertIsNotNone(self.cache.lookup("a"))
        self.assertIsNone(self.cache.lookup("a/b"))
        self.assertIsNone(self.cache.lookup("a/b/c.txt"))
        self.assertIsNone(self.cache.get_entry(3))
        self.assertIsNotNone(self.cache.lookup("z"))

    def test_forget_path_does_not_touch_siblings_with_common_prefix(self) -> None:
        self.cache.put("ab", _folder(5, "ab"))
        self.cache.forget_path("a")
        self.assertIsNotNone(self.cache.lookup("ab"))

    def test_forget_root_clears_everything(self) -> None:
        self.cache.forget_path("")
        self.assertEqual(len(self.cache), 0)
        self.assertIsNone(self.cache.get_entry(9))

    def test_forget_id_drops_all_paths(self) -> None:
        self.cache.put("alias", _folder(2, "alias"))
        self.cache.put("alias/d", _file(4, "d"))
        self.cache.forget_id(2)
        self.assertIsNone(self.cache.lookup("a/b"))
        self.assertIsNone(self.cache.lookup("a/b/c.txt"))
        self.assertIsNone(self.cache.lookup("alias/d"))
        self.assertIsNone(self.cache.lookup("alias"))
        self.assertIsNone(self.cache.get_entry(2))
        self.assertIsNotNone(self.cache.lookup("a"))

    def test_put_with_new_id_replaces_subtree(self) -> None:
        self.cache.put("a/b", _folder(20, "b", 1))
        self.assertEqual(self.cache.lookup_id("a/b"), 20)
        self.assertIsNone(self.cache.lookup("a/b/c.txt"))

    def test_put_same_id_keeps_subtree(self) -> None:
        self.cache.put("a/b", _folder(2, "b", 1))
        self.assertEqual(self.cache.lookup_id("a/b/c.txt"), 3)

    def test_put_entry_refreshes_lookup(self) -> None:
        self.cache.put_entry(Entry(id=3, name="c.txt", kind=FILE, size=99, parent_id=2))
        self.assertEqual(self.cache.lookup("a/b/c.txt").size, 99)
        self.cache.put_entry(Entry.root())

    def test_retain_children(self) -> None:
        self.cache.put("a/other", _file(6, "other", 1))
        self.cache.retain_children("a", {"other"})
        self.assertIsNone(self.cache.lookup("a/b"))
        self.assertIsNone(self.cache.lookup("a/b/c.txt"))
        self.assertIsNotNone(self.cache.lookup("a/other"))
        self.assertIsNotNone(self.cache.lookup("a"))

    def test_retain_children_of_root(self) -> None:
        self.cache.retain_children("", {"z"})
        self.assertIsNone(self.cache.lookup("a"))
        self.assertIsNone(self.cache.lookup("a/b"))
        self.assertIsNotNone(self.cache.lookup("z"))

    def test_clear(self) -> None:
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)


if __name__ == "__main__":
    unittest.main()
