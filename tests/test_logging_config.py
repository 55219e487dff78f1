"""
Tests for logging setup.
"""

import logging

import pytest

from nexavisualize.logging_config import (
    APP_LOGGER,
    LEVEL_ENV_VAR,
    LIBRARY_LOGGERS,
    resolve_level,
    setup_logging,
)


@pytest.fixture
def restore_loggers():
    """Put the app and library loggers back the way they were."""
    app = logging.getLogger(APP_LOGGER)
    saved_handlers = list(app.handlers)
    saved_levels = {name: logging.getLogger(name).level for name in (APP_LOGGER, *LIBRARY_LOGGERS)}
    yield
    for handler in list(app.handlers):
        app.removeHandler(handler)
        handler.close()
    for handler in saved_handlers:
        app.addHandler(handler)
    for name, level in saved_levels.items():
        logging.getLogger(name).setLevel(level)


class TestResolveLevel:
    """Tests for level selection."""

    def test_debug_flag_wins(self):
        assert resolve_level(debug=True, environ={LEVEL_ENV_VAR: "ERROR"}) == logging.DEBUG

    def test_environment_level(self):
        assert resolve_level(environ={LEVEL_ENV_VAR: " warning "}) == logging.WARNING

    @pytest.mark.parametrize("environ", [{}, {LEVEL_ENV_VAR: "loud"}, {LEVEL_ENV_VAR: ""}])
    def test_default_is_info(self, environ):
        assert resolve_level(environ=environ) == logging.INFO


@pytest.mark.usefixtures("restore_loggers")
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_explicit_level_overrides_debug(self):
        logger = setup_logging(level=logging.ERROR, debug=True)
        assert logger.name == APP_LOGGER
        assert logger.level == logging.ERROR

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(level=logging.INFO)
        logger = setup_logging(level=logging.INFO)
        assert len(logger.handlers) == 1

    def test_rendering_libraries_quiet_outside_debug(self):
        setup_logging(level=logging.INFO)
        for name in LIBRARY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_rendering_libraries_follow_debug(self):
        setup_logging(debug=True)
        for name in LIBRARY_LOGGERS:
            assert logging.getLogger(name).level == logging.DEBUG

    def test_log_file_receives_module_messages(self, tmp_path):
        log_file = tmp_path / "run.log"
        setup_logging(level=logging.INFO, log_file=str(log_file))
        logging.getLogger(f"{APP_LOGGER}.model.builder").info("Built graph.")
        for handler in logging.getLogger(APP_LOGGER).handlers:
            handler.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "nexavisualize.model.builder: Built graph." in text
