"""
Tests for Configuration and Logging
"""

import logging

import pytest

from pharmaflow.config import Config, DEFAULT_CONFIG
from pharmaflow.logger import ROOT_LOGGER, LogContext, configure_logging, get_logger


class TestConfig:

    def test_defaults(self):
        config = Config()

        assert config.analysis.irregular_variability_pct == 50.0
        assert config.analysis.seasonal_autocorrelation == 0.6
        assert config.forecast.method == "exponential_smoothing"
        assert config.stock.low_days_of_stock == 30
        assert config.alerts.acknowledged_retention_days == 30

    def test_from_dict_overrides_single_fields(self):
        config = Config.from_dict({
            'stock': {'low_days_of_stock': 45},
            'forecast': {'service_level': 0.99},
        })

        assert config.stock.low_days_of_stock == 45
        assert config.stock.excess_days_of_stock == 180
        assert config.forecast.service_level == 0.99
        assert DEFAULT_CONFIG.stock.low_days_of_stock == 30

    def test_unknown_section_rejected(self):
        with pytest.raises(ValueError, match="Unknown config section"):
            Config.from_dict({'dashboard': {}})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="Unknown stock setting"):
            Config.from_dict({'stock': {'reorder_days': 10}})

    def test_instances_do_not_share_mutable_defaults(self):
        first, second = Config(), Config()
        first.alerts.recommendations['stockOut'] = "Call the central store"

        assert second.alerts.recommendations['stockOut'] != "Call the central store"


class TestLogging:

    def test_module_loggers_share_the_package_root(self):
        logger = get_logger("pharmaflow.consumption")
        outside = get_logger("scripts.nightly")

        assert outside.name == "pharmaflow.scripts.nightly"
        assert logger.handlers == []
        assert logger.propagate is True
        assert logging.getLogger(ROOT_LOGGER).handlers

    def test_configure_logging_is_idempotent(self):
        root = configure_logging()
        handlers = list(root.handlers)

        assert configure_logging().handlers == handlers
        assert root.propagate is False

    def test_log_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "pharmaflow.log"
        root = configure_logging(level=logging.DEBUG, log_file=str(log_file))
        try:
            get_logger("pharmaflow.tests.file").debug("recompute started")
            configure_logging(level=logging.DEBUG, log_file=str(log_file))
            for handler in root.handlers:
                handler.flush()

            assert "recompute started" in log_file.read_text(encoding='utf-8')
            file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
            assert len(file_handlers) == 1
        finally:
            for handler in [h for h in root.handlers if isinstance(h, logging.FileHandler)]:
                root.removeHandler(handler)
                handler.close()
            configure_logging(level=logging.INFO)

    def test_log_context_reports_processed_items(self, caplog):
        logger = get_logger("pharmaflow.tests.context")
        logger.addHandler(caplog.handler)
        try:
            with LogContext(logger, "batch") as ctx:
                ctx.processed = 7
        finally:
            logger.removeHandler(caplog.handler)

        assert "Completed: batch - 7 items" in caplog.text

    def test_log_context_does_not_swallow_errors(self):
        logger = get_logger("pharmaflow.tests.context")

        with pytest.raises(RuntimeError):
            with LogContext(logger, "failing operation"):
                raise RuntimeError("boom")
