"""Tests for crash isolation."""

import unittest

from serenity_core.error_boundary import ErrorBoundary


def _boom():
    raise ValueError("boom")


class TestErrorBoundary(unittest.TestCase):
    def test_execute_returns_value(self):
        boundary = ErrorBoundary("test")
        self.assertEqual(boundary.execute(lambda x: x * 2, 4), 8)
        self.assertFalse(boundary.tripped)

    def test_execute_isolates_errors(self):
        boundary = ErrorBoundary("test")
        with self.assertLogs("serenity_core.error_boundary", level="ERROR"):
            self.assertIsNone(boundary.execute(_boom))
        self.assertEqual(boundary.error_count, 1)
        self.assertIsInstance(boundary.last_error, ValueError)
        self.assertTrue(boundary.tripped)

    def test_fallback_receives_exception(self):
        seen = []

        def fallback(exc):
            seen.append(exc)
            return "static"

        boundary = ErrorBoundary("test", fallback=fallback)
        with self.assertLogs("serenity_core.error_boundary", level="ERROR"):
            self.assertEqual(boundary.execute(_boom), "static")
        self.assertEqual(len(seen), 1)

    def test_fail_fast(self):
        boundary = ErrorBoundary("test", fail_fast=True)
        with self.assertLogs("serenity_core.error_boundary", level="ERROR"):
            with self.assertRaises(ValueError):
                boundary.execute(_boom)
        self.assertEqual(boundary.error_count, 1)

    def test_wrap_decorator(self):
        boundary = ErrorBoundary("test")

        @boundary.wrap
        def divide(a, b):
            return a / b

        self.assertEqual(divide.__name__, "divide")
        self.assertEqual(divide(6, 3), 2)
        with self.assertLogs("serenity_core.error_boundary", level="ERROR"):
            self.assertIsNone(divide(1, 0))

    def test_reset(self):
        boundary = ErrorBoundary("test")
        with self.assertLogs("serenity_core.error_boundary", level="ERROR"):
            boundary.execute(_boom)
        boundary.reset()
        self.assertEqual(boundary.error_count, 0)
        self.assertFalse(boundary.tripped)


if __name__ == "__main__":
    unittest.main()
