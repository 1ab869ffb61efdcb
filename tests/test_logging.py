"""
Tests for the CityTZ logging utilities.
"""

import json
import logging
import os
import shutil
import tempfile
import unittest
from logging.handlers import RotatingFileHandler

from CityTZ.config import get_config
from CityTZ.utils.logging import (
    PACKAGE_LOGGER_NAME,
    JsonFormatter,
    StructuredLoggerAdapter,
    configure_from_config,
    configure_logging,
    get_logger,
    get_request_id,
    set_log_level,
)


class TestLogging(unittest.TestCase):
    """Test cases for the logging helpers."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    def tearDown(self):
        configure_logging(level='info', use_json=False, log_file='')
        get_config()._initialize()
        shutil.rmtree(self.temp_dir)

    def test_get_logger(self):
        self.assertIsInstance(get_logger('CityTZ.tests'), logging.Logger)
        adapter = get_logger('CityTZ.tests', {'component': 'loader'})
        self.assertIsInstance(adapter, StructuredLoggerAdapter)

    def test_adapter_merges_extra(self):
        adapter = StructuredLoggerAdapter(logging.getLogger('CityTZ.tests'), {'component': 'api'})
        _, kwargs = adapter.process("msg", {'extra': {'request_id': 'r1'}})
        self.assertEqual(kwargs['extra']['extras'], {'component': 'api', 'request_id': 'r1'})

    def test_json_formatter(self):
        record = logging.LogRecord('CityTZ.tests', logging.WARNING, __file__, 1,
                                   "loaded %d cities", (3,), None)
        record.extras = {'component': 'loader'}

        document = json.loads(JsonFormatter().format(record))

        self.assertEqual(document['level'], 'WARNING')
        self.assertEqual(document['message'], 'loaded 3 cities')
        self.assertEqual(document['component'], 'loader')
        self.assertEqual(document['service_name'], 'citytz')

    def test_set_log_level(self):
        set_log_level('debug')
        self.assertEqual(self.package_logger.level, logging.DEBUG)
        set_log_level(logging.ERROR)
        self.assertEqual(self.package_logger.level, logging.ERROR)

        with self.assertRaises(ValueError):
            set_log_level('verbose')

    def test_configure_with_log_file(self):
        log_file = os.path.join(self.temp_dir, 'citytz.log')
        configure_logging(level='info', use_json=True, log_file=log_file)

        handlers = self.package_logger.handlers
        self.assertTrue(any(isinstance(h, RotatingFileHandler) for h in handlers))
        self.assertTrue(all(isinstance(h.formatter, JsonFormatter) for h in handlers))
        self.assertFalse(self.package_logger.propagate)

    def test_configure_from_config(self):
        config = get_config()
        config.set('logging.level', 'warning')
        config.set('logging.format', 'json')

        configure_from_config(config)

        if not os.environ.get('CITYTZ_LOG_LEVEL'):
            self.assertEqual(self.package_logger.level, logging.WARNING)

    def test_request_ids_are_unique(self):
        self.assertNotEqual(get_request_id(), get_request_id())


if __name__ == "__main__":
    unittest.main()
