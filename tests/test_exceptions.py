"""
Tests for the CityTZ error taxonomy.
"""

import unittest

from CityTZ.exceptions import (
    CacheError,
    CityTZError,
    DataLoadError,
    InvalidParameterError,
    RateLimitError,
    ResourceError,
    SearchError,
    ValidationError,
)


class TestErrorKinds(unittest.TestCase):
    """Test cases for the structured error kinds."""

    def test_data_load_error(self):
        cause = FileNotFoundError("cityMap.json")
        error = DataLoadError("locate", cause)

        self.assertEqual(error.operation, "locate")
        self.assertIs(error.__cause__, cause)
        self.assertEqual(str(error), "failed to load city data during locate: cityMap.json")
        self.assertEqual(error.status_code, 500)

    def test_validation_error_message(self):
        error = ValidationError("input", "too long")
        self.assertEqual(str(error), "validation error for field 'input': too long")
        self.assertIsNone(error.value)
        self.assertEqual(error.status_code, 400)

    def test_validation_error_with_value(self):
        error = ValidationError("iso_code", "invalid ISO2 format", value="U1",
                                detail="invalid ISO2 country code format")
        self.assertEqual(
            str(error),
            "validation error for field 'iso_code': invalid ISO2 country code format (value: U1)"
        )
        self.assertEqual(error.reason, "invalid ISO2 format")
        self.assertEqual(error.user_message, "Invalid iso_code: invalid ISO2 format.")

    def test_search_error_wraps_cause(self):
        cause = ValidationError("input", "suspicious pattern")
        error = SearchError("<script>", "lookup_exact", cause)

        self.assertEqual(error.query, "<script>")
        self.assertEqual(error.operation, "lookup_exact")
        self.assertIs(error.__cause__, cause)
        self.assertIn("during lookup_exact", str(error))
        # Client errors stay client errors
        self.assertEqual(error.status_code, 400)
        self.assertEqual(error.user_message, cause.user_message)

    def test_search_error_from_load_failure(self):
        error = SearchError("x", "search", DataLoadError("parse", ValueError("bad")))
        self.assertEqual(error.status_code, 500)
        self.assertEqual(error.error_code, "TZ-SEARCH-6001")

    def test_search_error_from_foreign_exception(self):
        error = SearchError("x", "all_records", RuntimeError("boom"))
        self.assertEqual(error.status_code, 500)
        self.assertEqual(error.user_message, SearchError.user_message)

    def test_cache_error(self):
        error = CacheError("set", "city:chicago", OSError("full"))
        self.assertEqual(error.key, "city:chicago")
        self.assertIn("during set", str(error))

    def test_admission_errors(self):
        self.assertEqual(RateLimitError().status_code, 429)
        self.assertEqual(ResourceError().status_code, 503)
        self.assertEqual(InvalidParameterError().status_code, 400)

    def test_hierarchy(self):
        for cls in (DataLoadError, ValidationError, SearchError, CacheError,
                    RateLimitError, ResourceError):
            self.assertTrue(issubclass(cls, CityTZError))


class TestToDict(unittest.TestCase):
    """Test cases for CityTZError.to_dict."""

    def test_user_facing_fields(self):
        error = RateLimitError(message="client 1.2.3.4 over limit")
        self.assertEqual(error.to_dict(), {
            "error_code": "TZ-API-3003",
            "message": "Rate limit exceeded. Please try again later.",
            "status_code": 429,
        })

    def test_debug_details(self):
        cause = ValueError("bad")
        error = CityTZError(message="technical", context={"debug": True, "key": "v"}, cause=cause)
        details = error.to_dict()["technical_details"]

        self.assertEqual(details["message"], "technical")
        self.assertEqual(details["context"], {"key": "v"})
        self.assertEqual(details["cause"], "bad")


if __name__ == "__main__":
    unittest.main()
