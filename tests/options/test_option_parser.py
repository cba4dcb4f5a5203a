import unittest

from hookrun.core.errors import OptionSyntaxError
from hookrun.options.parser import (
    NOT_FOUND,
    FlagMatch,
    MatchKind,
    OptionParser,
    ResolvedOption,
    ValueMatch,
    match_long,
    match_short,
)


class TestOptionMatching(unittest.TestCase):
    def test_match_short_flag_and_value(self) -> None:
        self.assertIs(match_short("i").kind, MatchKind.FLAG)
        self.assertIs(match_short("o").kind, MatchKind.VALUE)
        self.assertIs(match_short("x").kind, MatchKind.NOT_FOUND)

    def test_match_short_is_case_sensitive(self) -> None:
        self.assertEqual(match_short("v").spec.long, "version")
        self.assertEqual(match_short("V").spec.long, "verbose")
        self.assertEqual(match_short("h").spec.long, "help")
        self.assertEqual(match_short("H").spec.long, "history")

    def test_match_long_with_inline_value(self) -> None:
        match = match_long("optlevel=5")
        self.assertIs(match.kind, MatchKind.VALUE)
        self.assertEqual(match.inline_value, "5")

    def test_match_long_flag_rejects_inline_value(self) -> None:
        self.assertIs(match_long("debug").kind, MatchKind.FLAG)
        self.assertIs(match_long("debug=yes").kind, MatchKind.NOT_FOUND)

    def test_match_long_requires_full_name(self) -> None:
        self.assertIs(match_long("opt").kind, MatchKind.NOT_FOUND)
        self.assertIs(match_long("optlevelx").kind, MatchKind.NOT_FOUND)

    def test_found_matches_carry_their_spec(self) -> None:
        flag = match_short("d")
        self.assertIsInstance(flag, FlagMatch)
        self.assertEqual(flag.spec.long, "debug")
        value = match_long("history")
        self.assertIsInstance(value, ValueMatch)
        self.assertEqual(value.spec.placeholder, "FILE")
        self.assertIsNone(value.inline_value)
        self.assertIs(match_long("bogus"), NOT_FOUND)
        self.assertFalse(hasattr(NOT_FOUND, "spec"))


class TestOptionParser(unittest.TestCase):
    def test_flag_only_vectors_index_equals_option_count(self) -> None:
        for argv in (
            ["-i"],
            ["-i", "-d", "-V"],
            ["--interactive", "-s", "--debug", "script.py", "-i"],
            ["-isd", "--verbose"],
        ):
            parser = OptionParser(argv)
            parser.parse()
            option_tokens = [t for t in argv if t.startswith("-")]
            if "script.py" in argv:
                option_tokens = argv[: argv.index("script.py")]
            self.assertEqual(parser.index, len(option_tokens), argv)

    def test_cluster_resolves_each_letter(self) -> None:
        resolved = OptionParser(["-is"]).parse()
        self.assertEqual(resolved, [ResolvedOption("interactive"), ResolvedOption("silent")])

    def test_cluster_remainder_is_value(self) -> None:
        parser = OptionParser(["-io5", "script.py"])
        resolved = parser.parse()
        self.assertEqual(resolved, [ResolvedOption("interactive"), ResolvedOption("optlevel", "5")])
        self.assertEqual(parser.index, 1)

    def test_value_option_last_in_cluster_consumes_next_argument(self) -> None:
        parser = OptionParser(["-io", "3", "script.py"])
        resolved = parser.parse()
        self.assertEqual(resolved[-1], ResolvedOption("optlevel", "3"))
        self.assertEqual(parser.index, 2)

    def test_next_argument_is_consumed_even_if_it_looks_like_an_option(self) -> None:
        parser = OptionParser(["-o", "-1"])
        self.assertEqual(parser.parse(), [ResolvedOption("optlevel", "-1")])
        self.assertEqual(parser.index, 2)

    def test_long_option_separate_and_inline_value(self) -> None:
        self.assertEqual(
            OptionParser(["--optlevel", "5"]).parse(),
            OptionParser(["--optlevel=5"]).parse(),
        )

    def test_inline_value_may_contain_equals(self) -> None:
        resolved = OptionParser(["--expression=x = 1"]).parse()
        self.assertEqual(resolved, [ResolvedOption("expression", "x = 1")])

    def test_non_option_token_stops_scanning(self) -> None:
        parser = OptionParser(["-d", "script.py", "--bogus", "-x"])
        self.assertEqual(parser.parse(), [ResolvedOption("debug")])
        self.assertEqual(parser.index, 1)

    def test_lone_dash_is_positional(self) -> None:
        parser = OptionParser(["-i", "-", "arg"])
        parser.parse()
        self.assertEqual(parser.index, 1)

    def test_unknown_long_option_names_token(self) -> None:
        with self.assertRaises(OptionSyntaxError) as ctx:
            OptionParser(["--bogus"]).parse()
        self.assertEqual(ctx.exception.option, "--bogus")
        self.assertEqual(ctx.exception.code, "option.unknown")
        self.assertIn("--bogus", str(ctx.exception))

    def test_unknown_short_letter_in_cluster(self) -> None:
        with self.assertRaises(OptionSyntaxError) as ctx:
            OptionParser(["-iz"]).parse()
        self.assertEqual(ctx.exception.option, "-z")

    def test_flag_with_value_suffix_is_unknown(self) -> None:
        with self.assertRaises(OptionSyntaxError) as ctx:
            OptionParser(["--debug=1"]).parse()
        self.assertEqual(ctx.exception.option, "--debug=1")

    def test_missing_value_short(self) -> None:
        with self.assertRaises(OptionSyntaxError) as ctx:
            OptionParser(["-b"]).parse()
        self.assertEqual(ctx.exception.code, "option.missing_value")
        self.assertIn("-b", str(ctx.exception))
        self.assertIn("FILE", str(ctx.exception))

    def test_missing_value_long(self) -> None:
        with self.assertRaises(OptionSyntaxError) as ctx:
            OptionParser(["-i", "--optlevel"]).parse()
        self.assertEqual(ctx.exception.option, "--optlevel")
        self.assertIn("OPT", str(ctx.exception))

    def test_iteration_is_lazy(self) -> None:
        parser = OptionParser(["-h", "--bogus"])
        first = next(iter(parser))
        self.assertEqual(first, ResolvedOption("help"))


if __name__ == "__main__":
    unittest.main()
