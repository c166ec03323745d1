import unittest

from daymark.memo import VersionedMemo


class VersionedMemoTests(unittest.TestCase):
    def test_recomputes_only_on_key_change(self):
        memo = VersionedMemo()
        calls = []

        def compute():
            calls.append(1)
            return len(calls)

        self.assertEqual(memo.get(("skills", 1), compute), 1)
        self.assertEqual(memo.get(("skills", 1), compute), 1)
        self.assertEqual(memo.get(("skills", 2), compute), 2)
        self.assertEqual((memo.hits, memo.misses), (1, 2))

    def test_invalidate(self):
        memo = VersionedMemo()
        memo.get("k", lambda: "old")
        memo.invalidate()
        self.assertEqual(memo.get("k", lambda: "new"), "new")

    def test_none_is_a_valid_key(self):
        memo = VersionedMemo()
        memo.get(None, lambda: 1)
        self.assertEqual(memo.get(None, lambda: 2), 1)


if __name__ == "__main__":
    unittest.main()
