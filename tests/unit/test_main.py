"""Unit tests for the main entry point module."""

import logging
from unittest.mock import patch

import pytest

import sns_subscribe.__main__ as main_module
from sns_subscribe.__main__ import main, setup_logging


class TestSetupLogging:
    """Test the logging setup functionality."""

    @patch("sns_subscribe.__main__.settings")
    def test_setup_logging_json_format(self, mock_settings):
        """Test JSON logging configuration.

        Given: Settings configured for JSON logging
        When: setup_logging is called
        Then: JSON formatter should be configured
        """
        mock_settings.log_level = "INFO"
        mock_settings.log_format = "json"

        with patch("logging.basicConfig") as mock_basic_config:
            setup_logging()

            mock_basic_config.assert_called_once()
            call_kwargs = mock_basic_config.call_args[1]
            assert call_kwargs["level"] == logging.INFO
            handler = call_kwargs["handlers"][0]
            assert isinstance(handler.formatter, main_module.JsonFormatter)

    @patch("sns_subscribe.__main__.settings")
    def test_setup_logging_text_format(self, mock_settings):
        """Test text logging configuration.

        Given: Settings configured for text logging
        When: setup_logging is called
        Then: Plain text formatter should be configured
        """
        mock_settings.log_level = "DEBUG"
        mock_settings.log_format = "text"

        with patch("logging.basicConfig") as mock_basic_config:
            setup_logging()

            call_kwargs = mock_basic_config.call_args[1]
            assert call_kwargs["level"] == logging.DEBUG
            handler = call_kwargs["handlers"][0]
            assert not isinstance(handler.formatter, main_module.JsonFormatter)

    @patch("sns_subscribe.__main__.settings")
    def test_setup_logging_invalid_level(self, mock_settings):
        """Test logging with invalid level defaults to INFO."""
        mock_settings.log_level = "INVALID"
        mock_settings.log_format = "text"

        with patch("logging.basicConfig") as mock_basic_config:
            setup_logging()

            call_kwargs = mock_basic_config.call_args[1]
            assert call_kwargs["level"] == logging.INFO


class TestMain:
    """Test process exit codes."""

    @pytest.mark.parametrize("code", [0, 1, 2])
    def test_main_exits_with_cli_code(self, code):
        with (
            patch("sns_subscribe.__main__.setup_logging") as mock_setup,
            patch("sns_subscribe.cli.main", return_value=code),
        ):
            with pytest.raises(SystemExit) as exc_info:
                main()

            mock_setup.assert_called_once()
            assert exc_info.value.code == code
