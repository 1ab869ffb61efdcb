"""
Tests for the CityTZ search cache and its reader/writer lock.
"""

import threading
import time
import unittest

from CityTZ.data.cache import ReadWriteLock, SearchCache


class TestSearchCache(unittest.TestCase):
    """Test cases for SearchCache."""

    def setUp(self):
        self.cache = SearchCache()

    def test_miss(self):
        self.assertEqual(self.cache.get("city:nowhere"), (None, False))

    def test_set_then_get(self):
        self.cache.set("city:chicago", ("a", "b"))
        self.assertEqual(self.cache.get("city:chicago"), (("a", "b"), True))

    def test_empty_result_is_a_hit(self):
        self.cache.set("city:atlantis", ())
        value, found = self.cache.get("city:atlantis")
        self.assertTrue(found)
        self.assertEqual(value, ())

    def test_set_replaces(self):
        self.cache.set("k", (1,))
        self.cache.set("k", (2,))
        self.assertEqual(self.cache.get("k"), ((2,), True))
        self.assertEqual(self.cache.size(), 1)

    def test_clear(self):
        self.cache.set("a", ())
        self.cache.set("b", ())
        self.assertEqual(self.cache.size(), 2)
        self.assertEqual(len(self.cache), 2)

        self.cache.clear()

        self.assertEqual(self.cache.size(), 0)
        self.assertEqual(self.cache.get("a"), (None, False))

    def test_concurrent_writers_and_readers(self):
        errors = []

        def writer(start):
            for i in range(start, start + 200):
                self.cache.set(f"key:{i}", (i,))

        def reader():
            for i in range(400):
                value, found = self.cache.get(f"key:{i}")
                if found and value != (i,):
                    errors.append((i, value))

        threads = [threading.Thread(target=writer, args=(0,)),
                   threading.Thread(target=writer, args=(200,))]
        threads += [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(self.cache.size(), 400)


class TestReadWriteLock(unittest.TestCase):
    """Test cases for ReadWriteLock."""

    def test_readers_share_the_lock(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=5)

        def read():
            with lock.read():
                # Both readers must be inside at once for the barrier to pass
                inside.wait()

        threads = [threading.Thread(target=read) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertFalse(inside.broken)

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        events = []
        writer_in = threading.Event()

        def write():
            with lock.write():
                writer_in.set()
                events.append("write-start")
                time.sleep(0.05)
                events.append("write-end")

        def read():
            writer_in.wait(5)
            with lock.read():
                events.append("read")

        writer = threading.Thread(target=write)
        reader = threading.Thread(target=read)
        writer.start()
        reader.start()
        writer.join()
        reader.join()

        self.assertEqual(events, ["write-start", "write-end", "read"])


if __name__ == "__main__":
    unittest.main()
