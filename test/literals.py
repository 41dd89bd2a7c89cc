"""
Literal grammar tests (booleans, integers, floats, durations, quoting).

Scope
- Validate the exact accepted vocabularies and their rejection messages.
- Validate canonical rendering of floats and durations.

Conventions
- Test method names follow CamelCase per project convention.
- Messages are asserted verbatim: they end up in user-facing diagnostics.
"""

from __future__ import annotations

import math
import unittest
from datetime import timedelta
from unittest import TestCase

from pennant.faults import CoercionError
from pennant.literals import (
    quote,
    parse_bool,
    parse_integer,
    parse_float,
    render_float,
    parse_duration,
    render_duration,
)


class TestBooleans(TestCase):
    """The fixed boolean vocabulary."""

    def testTrueVocabulary(self):
        for text in ("1", "t", "T", "TRUE", "true", "True"):
            with self.subTest(text=text):
                self.assertIs(parse_bool(text), True)

    def testFalseVocabulary(self):
        for text in ("0", "f", "F", "FALSE", "false", "False"):
            with self.subTest(text=text):
                self.assertIs(parse_bool(text), False)

    def testOtherSpellingsRejected(self):
        for text in ("yes", "no", "tRUE", "", " true", "2"):
            with self.subTest(text=text):
                with self.assertRaises(CoercionError):
                    parse_bool(text)

    def testRejectionMessage(self):
        with self.assertRaises(CoercionError) as context:
            parse_bool("maybe")
        self.assertEqual(str(context.exception), 'parsing "maybe": invalid syntax')


class TestIntegers(TestCase):
    """Base auto-detection, signs and 64-bit ranges."""

    def testDecimal(self):
        self.assertEqual(parse_integer("42"), 42)
        self.assertEqual(parse_integer("-42"), -42)
        self.assertEqual(parse_integer("+7"), 7)
        self.assertEqual(parse_integer("0"), 0)

    def testHexadecimal(self):
        self.assertEqual(parse_integer("0x1F"), 31)
        self.assertEqual(parse_integer("0X1f"), 31)
        self.assertEqual(parse_integer("-0x10"), -16)

    def testLeadingZeroIsOctal(self):
        self.assertEqual(parse_integer("0755"), 493)
        self.assertEqual(parse_integer("-010"), -8)

    def testMalformedRejected(self):
        for text in ("", "08", "0x", "1_000", " 1", "1.0", "abc", "0b101", "--1"):
            with self.subTest(text=text):
                with self.assertRaises(CoercionError) as context:
                    parse_integer(text)
                self.assertEqual(str(context.exception), "parsing %s: invalid syntax" % quote(text))

    def testSignedRange(self):
        self.assertEqual(parse_integer("9223372036854775807"), 2 ** 63 - 1)
        self.assertEqual(parse_integer("-9223372036854775808"), -2 ** 63)
        with self.assertRaises(CoercionError) as context:
            parse_integer("9223372036854775808")
        self.assertEqual(str(context.exception), 'parsing "9223372036854775808": value out of range')

    def testUnsignedRejectsSignsWithSyntaxMessage(self):
        for text in ("-1", "+1"):
            with self.subTest(text=text):
                with self.assertRaises(CoercionError) as context:
                    parse_integer(text, signed=False)
                self.assertEqual(str(context.exception), "parsing %s: invalid syntax" % quote(text))

    def testUnsignedRange(self):
        self.assertEqual(parse_integer("18446744073709551615", signed=False), 2 ** 64 - 1)
        with self.assertRaises(CoercionError):
            parse_integer("18446744073709551616", signed=False)


class TestFloats(TestCase):
    """Decimal/scientific notation and canonical rendering."""

    def testAcceptedForms(self):
        cases = {
            "1.5": 1.5,
            "1e3": 1000.0,
            ".5": 0.5,
            "5.": 5.0,
            "-2.5E-3": -0.0025,
            "+3": 3.0,
        }
        for text, expected in cases.items():
            with self.subTest(text=text):
                self.assertEqual(parse_float(text), expected)

    def testSpecialValues(self):
        self.assertEqual(parse_float("inf"), math.inf)
        self.assertEqual(parse_float("-Infinity"), -math.inf)
        self.assertTrue(math.isnan(parse_float("NaN")))

    def testMalformedRejected(self):
        for text in ("", "abc", "1_0", " 1", "1e", "e5", "."):
            with self.subTest(text=text):
                with self.assertRaises(CoercionError):
                    parse_float(text)

    def testOverflowIsOutOfRange(self):
        with self.assertRaises(CoercionError) as context:
            parse_float("1e400")
        self.assertEqual(str(context.exception), 'parsing "1e400": value out of range')

    def testRendering(self):
        cases = {
            3.0: "3",
            1.5: "1.5",
            0.1: "0.1",
            -2.5: "-2.5",
            0.0: "0",
            123456.0: "123456",
            1e6: "1e+06",
            1234567.0: "1.234567e+06",
            0.0001: "0.0001",
            1e-05: "1e-05",
            1e100: "1e+100",
        }
        for number, expected in cases.items():
            with self.subTest(number=number):
                self.assertEqual(render_float(number), expected)

    def testRenderingSpecialValues(self):
        self.assertEqual(render_float(math.inf), "+Inf")
        self.assertEqual(render_float(-math.inf), "-Inf")
        self.assertEqual(render_float(math.nan), "NaN")

    def testRenderedTextParsesBack(self):
        for number in (3.0, 0.1, 1e6, 1234567.0, 1e-05, -2.5, 6.02214076e23):
            with self.subTest(number=number):
                self.assertEqual(parse_float(render_float(number)), number)


class TestDurations(TestCase):
    """Unit-suffixed duration expressions."""

    def testSingleUnits(self):
        self.assertEqual(parse_duration("300ms"), timedelta(milliseconds=300))
        self.assertEqual(parse_duration("2h"), timedelta(hours=2))
        self.assertEqual(parse_duration("45s"), timedelta(seconds=45))
        self.assertEqual(parse_duration("7us"), timedelta(microseconds=7))
        self.assertEqual(parse_duration("7µs"), timedelta(microseconds=7))
        self.assertEqual(parse_duration("7μs"), timedelta(microseconds=7))

    def testCompoundAndFractional(self):
        self.assertEqual(parse_duration("1h30m"), timedelta(hours=1, minutes=30))
        self.assertEqual(parse_duration("1.5s"), timedelta(seconds=1.5))
        self.assertEqual(parse_duration(".5m"), timedelta(seconds=30))
        self.assertEqual(parse_duration("-2m3.5s"), -timedelta(minutes=2, seconds=3.5))
        self.assertEqual(parse_duration("+5s"), timedelta(seconds=5))

    def testBareZero(self):
        self.assertEqual(parse_duration("0"), timedelta(0))
        self.assertEqual(parse_duration("-0"), timedelta(0))

    def testSubMicrosecondTruncates(self):
        self.assertEqual(parse_duration("1500ns"), timedelta(microseconds=1))
        self.assertEqual(parse_duration("999ns"), timedelta(0))

    def testInvalid(self):
        for text in ("", "-", "s", ".s", "h1", "+"):
            with self.subTest(text=text):
                with self.assertRaises(CoercionError) as context:
                    parse_duration(text)
                self.assertEqual(str(context.exception), "invalid duration %s" % quote(text))

    def testMissingUnit(self):
        with self.assertRaises(CoercionError) as context:
            parse_duration("1h30")
        self.assertEqual(str(context.exception), 'missing unit in duration "1h30"')

    def testUnknownUnit(self):
        with self.assertRaises(CoercionError) as context:
            parse_duration("3days")
        self.assertEqual(str(context.exception), 'unknown unit "days" in duration "3days"')

    def testOverflow(self):
        with self.assertRaises(CoercionError):
            parse_duration("3000000h")

    def testRendering(self):
        cases = {
            timedelta(0): "0s",
            timedelta(hours=1, minutes=30): "1h30m0s",
            timedelta(hours=2): "2h0m0s",
            timedelta(minutes=1): "1m0s",
            timedelta(seconds=1.5): "1.5s",
            timedelta(seconds=0.5): "500ms",
            timedelta(microseconds=1500): "1.5ms",
            timedelta(microseconds=5): "5µs",
            -timedelta(seconds=90): "-1m30s",
            timedelta(days=2): "48h0m0s",
        }
        for duration, expected in cases.items():
            with self.subTest(duration=duration):
                self.assertEqual(render_duration(duration), expected)

    def testRenderedTextParsesBack(self):
        for duration in (timedelta(hours=3, seconds=0.25), timedelta(microseconds=42), -timedelta(minutes=5)):
            with self.subTest(duration=duration):
                self.assertEqual(parse_duration(render_duration(duration)), duration)


class TestQuote(TestCase):
    """Double-quoting of echoed text."""

    def testQuote(self):
        self.assertEqual(quote("a b"), '"a b"')
        self.assertEqual(quote(""), '""')
        self.assertEqual(quote('say "hi"'), '"say \\"hi\\""')


if __name__ == "__main__":
    unittest.main()
