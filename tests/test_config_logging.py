"""Tests for settings, logging setup and the error hierarchy."""
import json
import logging
import unittest
from unittest.mock import patch

from config import Settings
from exceptions import (
    LendingError,
    LoanPaidOffError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from log_config import JsonFormatter, get_logger, setup_logging
from utils.money import money_out, round_money


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        s = Settings(_env_file=None)
        self.assertEqual(s.api_prefix, "/api/v1")
        self.assertTrue(s.is_sqlite)
        self.assertFalse(s.is_postgresql)

    def test_env_override(self):
        env = {"DATABASE_URL": "postgresql+asyncpg://u:p@db/bank", "LOG_LEVEL": "DEBUG"}
        with patch.dict("os.environ", env):
            s = Settings(_env_file=None)
        self.assertTrue(s.is_postgresql)
        self.assertFalse(s.is_sqlite)
        self.assertEqual(s.log_level, "DEBUG")


class TestLogging(unittest.TestCase):
    def tearDown(self):
        setup_logging("INFO")

    def test_setup_sets_level_and_single_handler(self):
        setup_logging("DEBUG")
        root = logging.getLogger()
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)

    def test_json_format(self):
        setup_logging("INFO", "json")
        self.assertIsInstance(logging.getLogger().handlers[0].formatter, JsonFormatter)
        record = logging.LogRecord("services.lending", logging.INFO, __file__, 1, "paid %s", ("loan-1",), None)
        data = json.loads(JsonFormatter().format(record))
        self.assertEqual(data["message"], "paid loan-1")
        self.assertEqual(data["logger"], "services.lending")
        self.assertEqual(set(data), {"timestamp", "level", "logger", "message"})

    def test_get_logger(self):
        self.assertEqual(get_logger("services.lending").name, "services.lending")


class TestExceptions(unittest.TestCase):
    def test_hierarchy(self):
        self.assertTrue(issubclass(LoanPaidOffError, ValidationError))
        for cls in (ValidationError, NotFoundError, PersistenceError):
            self.assertTrue(issubclass(cls, LendingError))


class TestMoney(unittest.TestCase):
    def test_round_half_up(self):
        from decimal import Decimal

        self.assertEqual(round_money(Decimal("2.675")), Decimal("2.68"))
        self.assertEqual(money_out(Decimal("27.777777")), 27.78)
        self.assertEqual(money_out(Decimal("-1")), -1.0)


if __name__ == "__main__":
    unittest.main()
