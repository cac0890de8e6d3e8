"""Tests for logging setup."""

from __future__ import annotations

import logging
from unittest.mock import patch

from coinfolio import log_config


class TestSetup:
    """Tests for log_config.setup."""

    def test_default_level_is_info(self):
        with patch("coinfolio.log_config.logging.basicConfig") as basic_config:
            log_config.setup()
        assert basic_config.call_args.kwargs["level"] == logging.INFO

    def test_verbose_enables_debug(self):
        with patch("coinfolio.log_config.logging.basicConfig") as basic_config:
            log_config.setup(verbose=True)
        kwargs = basic_config.call_args.kwargs
        assert kwargs["level"] == logging.DEBUG
        assert "%(name)s" in kwargs["format"]
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_quiets_httpx_by_default(self):
        with patch("coinfolio.log_config.logging.basicConfig"):
            log_config.setup()
        assert logging.getLogger("httpx").level == logging.WARNING
