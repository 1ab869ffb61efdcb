"""
Tests for the CityTZ CityData facade against the bundled dataset.
"""

import unittest

from CityTZ import CityData
from CityTZ.config import get_config
from CityTZ.data.loader import DatasetLoader, get_package_data_file
from CityTZ.data.models import SearchOptions
from CityTZ.exceptions import ConfigError, DataLoadError, SearchError


class TestCityData(unittest.TestCase):
    """Test cases for CityData."""

    def setUp(self):
        self.config = get_config()
        self.config._initialize()
        self.city_data = CityData(data_file=get_package_data_file())

    def tearDown(self):
        self.config._initialize()

    def test_lookup_exact(self):
        results = self.city_data.lookup_exact("Chicago")
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].timezone, "America/Chicago")
        self.assertEqual(results[0].iso3, "USA")

    def test_lookup_exact_duplicates(self):
        results = self.city_data.lookup_exact("springfield")
        self.assertEqual([r.state_ansi for r in results], ["IL", "MO", "MA"])

    def test_find_partial(self):
        results = self.city_data.find_partial("springfield mo")
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].province, "Missouri")

    def test_find_by_country_code(self):
        iso2 = self.city_data.find_by_country_code("DE")
        iso3 = self.city_data.find_by_country_code("deu")
        self.assertEqual([r.city for r in iso2], ["Berlin"])
        self.assertEqual(iso2, iso3)

    def test_search(self):
        results = self.city_data.search("London", SearchOptions(exact_match=True))
        self.assertEqual(sorted(r.country for r in results), ["Canada", "United Kingdom"])

    def test_all_records(self):
        records = self.city_data.all_records()
        self.assertEqual(records[0].city, "Chicago")
        self.assertEqual(len(records), self.city_data.get_dataset_info()['record_count'])

    def test_cache_management(self):
        self.assertEqual(self.city_data.cache_size(), 0)
        self.city_data.lookup_exact("Chicago")
        self.city_data.lookup_exact("chicago")
        self.city_data.lookup_exact("Atlantis")
        self.assertEqual(self.city_data.cache_size(), 2)

        self.city_data.clear_cache()
        self.assertEqual(self.city_data.cache_size(), 0)

    def test_context_manager_clears_cache(self):
        with CityData(data_file=get_package_data_file()) as city_data:
            city_data.lookup_exact("Berlin")
            self.assertEqual(city_data.cache_size(), 1)
        self.assertEqual(city_data.cache_size(), 0)

    def test_dataset_info(self):
        info = self.city_data.get_dataset_info()
        self.assertTrue(info['loaded'])
        self.assertEqual(info['source'], get_package_data_file())
        self.assertGreater(info['record_count'], 10)
        self.assertEqual(info['active_searches'], 0)
        self.assertNotIn('error', info)

    def test_dataset_info_reports_load_failure(self):
        city_data = CityData(data_file="/nowhere/cityMap.json")
        info = city_data.get_dataset_info()
        self.assertFalse(info['loaded'])
        self.assertEqual(info['record_count'], 0)
        self.assertIn("locate", info['error'])

        with self.assertRaises(SearchError) as ctx:
            city_data.lookup_exact("Chicago")
        self.assertIsInstance(ctx.exception.__cause__, DataLoadError)

    def test_limits_come_from_config(self):
        self.config.set("search.max_city_length", 5)
        self.config.set("limits.rate_limit.limit", 7)
        self.config.set("limits.resources.max_concurrent_searches", 3)

        city_data = CityData(data_file=get_package_data_file())

        self.assertEqual(city_data.engine.max_city_length, 5)
        self.assertEqual(city_data.rate_limiter.limit, 7)
        self.assertEqual(city_data.resource_manager.max_concurrent_searches, 3)
        with self.assertRaises(SearchError):
            city_data.lookup_exact("Chicago")

    def test_invalid_rate_limit_settings(self):
        self.config.set("limits.rate_limit.window", 0)
        with self.assertRaises(ConfigError) as ctx:
            CityData(data_file=get_package_data_file())
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_instances_do_not_share_state(self):
        other = CityData(data_file=get_package_data_file())
        self.city_data.lookup_exact("Chicago")
        self.assertEqual(other.cache_size(), 0)
        self.assertIsNot(other.rate_limiter, self.city_data.rate_limiter)

    def test_custom_loader(self):
        loader = DatasetLoader(reader=lambda: [])
        city_data = CityData(loader=loader)
        self.assertEqual(city_data.all_records(), [])
        self.assertIs(city_data.loader, loader)


if __name__ == "__main__":
    unittest.main()
