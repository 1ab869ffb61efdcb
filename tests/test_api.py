"""
Tests for the CityTZ REST API.
"""

import unittest

from CityTZ.api.server import create_app, format_response
from CityTZ.config import get_config
from CityTZ.data import CityData
from CityTZ.data.loader import DatasetLoader, get_package_data_file
from CityTZ.exceptions import DataLoadError


class APITestCase(unittest.TestCase):

    def setUp(self):
        self.config = get_config()
        self.config._initialize()
        self.app = create_app(CityData(data_file=get_package_data_file()))
        self.app.testing = True
        self.client = self.app.test_client()

    def tearDown(self):
        self.config._initialize()

    def get_json(self, url, status=200):
        response = self.client.get(url)
        self.assertEqual(response.status_code, status, response.get_data(as_text=True))
        return response.get_json()


class TestHealthAndStatus(APITestCase):
    """Test cases for service endpoints."""

    def test_health(self):
        body = self.get_json('/health')
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['status'], 'ok')
        self.assertTrue(body['data']['initialized'])

    def test_status(self):
        body = self.get_json('/api/status')
        self.assertTrue(body['data']['loaded'])
        self.assertGreater(body['data']['record_count'], 0)
        self.assertEqual(body['data']['active_searches'], 0)

    def test_timing_and_request_id_headers(self):
        response = self.client.get('/health', headers={'X-Request-ID': 'abc-123'})
        self.assertIn('X-Request-Duration-Ms', response.headers)
        self.assertEqual(response.headers['X-Request-ID'], 'abc-123')

    def test_not_found(self):
        body = self.get_json('/api/nothing', status=404)
        self.assertFalse(body['success'])
        self.assertEqual(body['status_code'], 404)

    def test_health_when_data_missing(self):
        app = create_app(CityData(data_file='/nowhere/cityMap.json'))
        body = app.test_client().get('/health').get_json()
        self.assertFalse(body['data']['initialized'])


class TestCityEndpoints(APITestCase):
    """Test cases for the city query endpoints."""

    def test_lookup(self):
        body = self.get_json('/api/cities/lookup?city=chicago')
        data = body['data']
        self.assertEqual(data['city'], 'chicago')
        self.assertEqual(data['count'], 1)
        self.assertEqual(data['results'][0]['timezone'], 'America/Chicago')
        self.assertEqual(data['results'][0]['exactCity'], 'Chicago')

    def test_lookup_requires_city(self):
        body = self.get_json('/api/cities/lookup', status=400)
        self.assertEqual(body['error_code'], 'TZ-API-3004')

    def test_lookup_rejects_suspicious_input(self):
        body = self.get_json('/api/cities/lookup?city=../etc/passwd', status=400)
        self.assertEqual(body['error'], 'SearchError')
        self.assertEqual(body['error_code'], 'TZ-SEARCH-6001')

    def test_search(self):
        data = self.get_json('/api/cities/search?q=springfield%20mo')['data']
        self.assertEqual(data['count'], 1)
        self.assertEqual(data['results'][0]['province'], 'Missouri')

    def test_search_with_filters(self):
        data = self.get_json('/api/cities/search?q=springfield&timezone=chicago')['data']
        self.assertEqual(data['count'], 2)
        self.assertEqual(data['filters'], {'timezone': 'chicago'})

    def test_iso(self):
        data = self.get_json('/api/cities/iso/deu')['data']
        self.assertEqual(data['code'], 'DEU')
        self.assertEqual([r['city'] for r in data['results']], ['Berlin'])

    def test_iso_invalid(self):
        body = self.get_json('/api/cities/iso/U1', status=400)
        self.assertFalse(body['success'])

    def test_match(self):
        data = self.get_json('/api/cities/match?q=london&exact=true')['data']
        self.assertEqual(data['count'], 2)
        self.assertTrue(data['exact'])
        self.assertFalse(data['case_sensitive'])

    def test_match_case_sensitive(self):
        data = self.get_json('/api/cities/match?q=london&case_sensitive=1&exact=1')['data']
        self.assertEqual(data['count'], 0)

    def test_match_validates_query(self):
        body = self.get_json('/api/cities/match?q=javascript:alert(1)', status=400)
        self.assertEqual(body['error'], 'ValidationError')

    def test_all_cities(self):
        data = self.get_json('/api/cities?limit=3')['data']
        self.assertEqual(data['count'], 3)
        self.assertEqual(data['results'][0]['city'], 'Chicago')

    def test_all_cities_default_limit(self):
        data = self.get_json('/api/cities')['data']
        self.assertEqual(data['count'], 10)

    def test_invalid_limit(self):
        body = self.get_json('/api/cities?limit=ten', status=400)
        self.assertEqual(body['error'], 'InvalidParameterError')

    def test_limit_above_maximum(self):
        self.get_json('/api/cities?limit=5000', status=400)


class TestAdmissionErrors(APITestCase):
    """Test cases for error status mapping."""

    def test_rate_limit_returns_429(self):
        self.config.set("limits.rate_limit.limit", 1)
        app = create_app(CityData(data_file=get_package_data_file()))
        client = app.test_client()

        self.assertEqual(client.get('/api/cities/lookup?city=Chicago').status_code, 200)
        response = client.get('/api/cities/lookup?city=Chicago')

        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.get_json()['error_code'], 'TZ-API-3003')

    def test_resource_exhaustion_returns_503(self):
        self.config.set("limits.resources.max_concurrent_searches", 1)
        city_data = CityData(data_file=get_package_data_file())
        app = create_app(city_data)
        city_data.resource_manager.allocate(1)

        response = app.test_client().get('/api/cities/lookup?city=Chicago')

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.get_json()['error'], 'ResourceError')

    def test_load_failure_returns_500(self):
        def reader():
            raise DataLoadError("parse", ValueError("broken"))

        app = create_app(CityData(loader=DatasetLoader(reader=reader)))
        response = app.test_client().get('/api/cities/search?q=berlin')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json()['error'], 'SearchError')

    def test_debug_mode_includes_technical_details(self):
        app = create_app(CityData(data_file=get_package_data_file()), debug=True)
        body = app.test_client().get('/api/cities/iso/U1').get_json()
        self.assertIn('message', body['meta'])


class TestFormatResponse(unittest.TestCase):
    """Test cases for format_response."""

    def test_success(self):
        body, status = format_response(data={'a': 1})
        self.assertEqual(status, 200)
        self.assertEqual(body, {'success': True, 'status_code': 200, 'data': {'a': 1}})

    def test_error(self):
        body, status = format_response(error='Bad', message='nope', status_code=400, error_code='X')
        self.assertEqual(status, 400)
        self.assertFalse(body['success'])
        self.assertEqual(body['error_code'], 'X')
        self.assertNotIn('data', body)


if __name__ == "__main__":
    unittest.main()
