import unittest

from maildirkit import flags


class TestFlagCodec(unittest.TestCase):

    def test_parse(self) -> None:
        self.assertEqual(
            flags.parse_cur_filename("123.M1P2Q3.host:2,FS"),
            flags.CurFilename("123.M1P2Q3.host", "FS"),
        )
        self.assertEqual(flags.parse_cur_filename("abc:2,"), flags.CurFilename("abc", ""))

    def test_parse_without_info(self) -> None:
        self.assertEqual(flags.parse_cur_filename("abc"), flags.CurFilename("abc", ""))

    def test_format(self) -> None:
        self.assertEqual(flags.format_cur_filename("abc"), "abc:2,")
        self.assertEqual(flags.format_cur_filename("abc", "RS"), "abc:2,RS")

    def test_logical_name(self) -> None:
        self.assertEqual(flags.logical_name("abc:2,S"), "abc")
        self.assertEqual(flags.logical_name("abc"), "abc")

    def test_add_flag_sorts(self) -> None:
        self.assertEqual(flags.add_flag("", "F"), "F")
        self.assertEqual(flags.add_flag("F", "A"), "AF")
        self.assertEqual(flags.add_flag("AF", "R"), "AFR")

    def test_add_flag_present(self) -> None:
        self.assertEqual(flags.add_flag("AF", "F"), "AF")

    def test_add_flag_dedups(self) -> None:
        self.assertEqual(flags.add_flag("SAA", "D"), "ADS")

    def test_remove_flag_all_occurrences(self) -> None:
        self.assertEqual(flags.remove_flag("AAF", "A"), "F")
        self.assertEqual(flags.remove_flag("AF", "S"), "AF")

    def test_invalid_flag(self) -> None:
        for bad in ("", "AB", ":", "/"):
            with self.subTest(flag=bad):
                with self.assertRaises(ValueError):
                    flags.add_flag("", bad)


if __name__ == "__main__":
    unittest.main()
