"""
Tests for the CityTZ service layer: admission control, filters and limits.
"""

import threading
import unittest

from CityTZ.config import get_config
from CityTZ.data import CityData
from CityTZ.data.loader import DatasetLoader, get_package_data_file
from CityTZ.data.models import CityRecord
from CityTZ.exceptions import RateLimitError, ResourceError, SearchError
from CityTZ.services import CityService, filter_records


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class ServiceTestCase(unittest.TestCase):

    def setUp(self):
        self.config = get_config()
        self.config._initialize()
        self.clock = FakeClock()

    def tearDown(self):
        self.config._initialize()

    def make_service(self, loader=None):
        city_data = CityData(data_file=get_package_data_file(), loader=loader, clock=self.clock)
        return CityService(city_data=city_data)


class TestCityServiceQueries(ServiceTestCase):
    """Test cases for the CityService query methods."""

    def test_lookup_city(self):
        service = self.make_service()
        results = service.lookup_city("Chicago")
        self.assertEqual([r.city for r in results], ["Chicago"])

    def test_find_cities(self):
        results = self.make_service().find_cities("springfield")
        self.assertEqual(len(results), 3)

    def test_find_by_iso(self):
        results = self.make_service().find_by_iso("CA")
        self.assertEqual(sorted(r.city for r in results), ["London", "Toronto"])

    def test_search_cities(self):
        service = self.make_service()
        self.assertEqual(len(service.search_cities("paris", exact_match=True)), 2)
        self.assertEqual(service.search_cities("paris", case_sensitive=True, exact_match=True), [])

    def test_all_cities_uses_default_limit(self):
        service = self.make_service()
        self.assertEqual(len(service.all_cities()), 10)

    def test_limit(self):
        service = self.make_service()
        self.assertEqual(len(service.all_cities(limit=3)), 3)
        total = service.city_data.get_dataset_info()['record_count']
        self.assertEqual(len(service.all_cities(limit=0)), total)
        self.assertEqual(len(service.all_cities(limit=-1)), total)

    def test_limit_is_capped(self):
        self.config.set("search.limits.max", 4)
        service = self.make_service()
        self.assertEqual(len(service.all_cities(limit=100)), 4)
        self.assertEqual(len(service.all_cities(limit=0)), 4)

    def test_filters(self):
        service = self.make_service()

        results = service.find_cities("london", country="canada")
        self.assertEqual([r.province for r in results], ["Ontario"])

        results = service.lookup_city("springfield", timezone="new_york")
        self.assertEqual([r.state_ansi for r in results], ["MA"])

        results = service.all_cities(timezone="europe", country="france", limit=0)
        self.assertEqual([r.city for r in results], ["Paris"])

    def test_filter_is_applied_before_limit(self):
        service = self.make_service()
        results = service.all_cities(timezone="asia", limit=1)
        self.assertEqual(len(results), 1)
        self.assertTrue(results[0].timezone.startswith("Asia/"))

    def test_search_errors_propagate(self):
        service = self.make_service()
        with self.assertRaises(SearchError):
            service.lookup_city("<script>")
        # The budget is returned even when the search fails
        self.assertEqual(service.city_data.resource_manager.active_searches, 0)
        self.assertEqual(service.city_data.resource_manager.current_mb, 0)

    def test_get_status(self):
        status = self.make_service().get_status()
        self.assertTrue(status['loaded'])
        self.assertIn('rate_limit', status)
        self.assertEqual(status['resources']['max_memory_mb'], 500)


class TestCityServiceAdmission(ServiceTestCase):
    """Test cases for rate limiting and resource budgeting in CityService."""

    def test_rate_limit(self):
        self.config.set("limits.rate_limit.limit", 2)
        service = self.make_service()

        service.lookup_city("Chicago", client_key="a")
        service.lookup_city("Chicago", client_key="a")
        with self.assertRaises(RateLimitError) as ctx:
            service.lookup_city("Chicago", client_key="a")

        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(ctx.exception.context['client_key'], "a")

        # Other clients are unaffected
        service.lookup_city("Chicago", client_key="b")

    def test_rate_limit_window_passes(self):
        self.config.set("limits.rate_limit.limit", 1)
        self.config.set("limits.rate_limit.window", 10)
        service = self.make_service()

        service.all_cities(client_key="a")
        with self.assertRaises(RateLimitError):
            service.all_cities(client_key="a")

        self.clock.now += 10
        service.all_cities(client_key="a")

    def test_rate_limit_can_be_disabled(self):
        self.config.set("limits.rate_limit.limit", 1)
        self.config.set("limits.rate_limit.enabled", False)
        service = self.make_service()
        for _ in range(5):
            service.lookup_city("Chicago", client_key="a")

    def test_resource_budget_exhausted(self):
        self.config.set("limits.resources.max_concurrent_searches", 1)
        inside = threading.Event()
        release = threading.Event()

        def slow_reader():
            inside.set()
            release.wait(5)
            return [CityRecord(city="Chicago")]

        service = self.make_service(loader=DatasetLoader(reader=slow_reader))
        worker = threading.Thread(target=lambda: service.all_cities(client_key="a"))
        worker.start()
        try:
            self.assertTrue(inside.wait(5))
            with self.assertRaises(ResourceError) as ctx:
                service.all_cities(client_key="b")
            self.assertEqual(ctx.exception.status_code, 503)
        finally:
            release.set()
            worker.join()

        self.assertEqual(service.city_data.resource_manager.active_searches, 0)
        self.assertEqual(len(service.all_cities(client_key="b")), 1)

    def test_resource_budget_can_be_disabled(self):
        self.config.set("limits.resources.enabled", False)
        self.config.set("limits.resources.max_concurrent_searches", 1)
        service = self.make_service()
        service.city_data.resource_manager.allocate(1)

        self.assertEqual(len(service.lookup_city("Chicago")), 1)


class TestFilterRecords(unittest.TestCase):
    """Test cases for filter_records."""

    def test_no_filters(self):
        records = [CityRecord(city="A")]
        self.assertEqual(filter_records(records), records)

    def test_case_insensitive_substring(self):
        records = [
            CityRecord(city="A", timezone="America/Chicago", country="United States of America"),
            CityRecord(city="B", timezone="Europe/Berlin", country="Germany"),
        ]
        self.assertEqual([r.city for r in filter_records(records, timezone="CHICAGO")], ["A"])
        self.assertEqual([r.city for r in filter_records(records, country="germ")], ["B"])
        self.assertEqual(filter_records(records, timezone="europe", country="states"), [])


if __name__ == "__main__":
    unittest.main()
