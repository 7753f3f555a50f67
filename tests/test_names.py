import os
import re
import unittest
from unittest import mock

from maildirkit import names

NAME_RE = re.compile(r"^(\d+)\.M(\d+)P(\d+)Q(\d+)\.(.+)$")


class TestNameGenerator(unittest.TestCase):

    def test_format(self) -> None:
        gen = names.NameGenerator()
        with mock.patch("socket.gethostname", return_value="mx.example.com"):
            name = gen.next_name()
        m = NAME_RE.match(name)
        self.assertIsNotNone(m)
        assert m
        sec, usec, pid, seq, host = m.groups()
        self.assertLess(int(usec), 1_000_000)
        self.assertEqual(int(pid), os.getpid())
        self.assertEqual(seq, "1")
        self.assertEqual(host, "mx.example.com")

    def test_counter_increments(self) -> None:
        gen = names.NameGenerator()
        seqs = [int(NAME_RE.match(gen.next_name()).group(4)) for _ in range(3)]  # type: ignore
        self.assertEqual(seqs, [1, 2, 3])

    def test_unique_within_same_microsecond(self) -> None:
        gen = names.NameGenerator()
        with mock.patch("time.time_ns", return_value=1_700_000_000_123_456_789):
            generated = [gen.next_name() for _ in range(1000)]
        self.assertEqual(len(set(generated)), 1000)
        self.assertTrue(generated[0].startswith("1700000000.M123456P"))

    def test_generators_have_own_counters(self) -> None:
        first, second = names.NameGenerator(), names.NameGenerator()
        first.next_name()
        self.assertEqual(NAME_RE.match(second.next_name()).group(4), "1")  # type: ignore

    def test_create_name_shares_counter(self) -> None:
        a = int(NAME_RE.match(names.create_name()).group(4))  # type: ignore
        b = int(NAME_RE.match(names.create_name()).group(4))  # type: ignore
        self.assertEqual(b, a + 1)

    def test_hostname_sanitized(self) -> None:
        gen = names.NameGenerator()
        with mock.patch("socket.gethostname", return_value="bad:host/name"):
            name = gen.next_name()
        self.assertNotIn(":", name)
        self.assertNotIn("/", name)
        self.assertTrue(name.endswith(r".bad\072host\057name"))


if __name__ == "__main__":
    unittest.main()
