import logging
from logging.handlers import RotatingFileHandler

from automod.util import logger as logger_module
from automod.util.logger import (
    ColorFormatter,
    PromptToolkitHandler,
    get_log_filepath,
    get_logger,
    handle_exception,
    setup_logger,
    should_use_color,
)


class DummyStream:
    def __init__(self, tty=True):
        self.tty = tty

    def write(self, msg):
        pass

    def isatty(self):
        return self.tty


def test_get_logger_attaches_console_and_file_handlers():
    logger = get_logger("test_automod_logger")
    assert isinstance(logger, logging.Logger)
    assert logger.propagate is False
    assert any(isinstance(h, PromptToolkitHandler) for h in logger.handlers)
    assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)


def test_setup_logger_idempotent():
    logger1 = setup_logger("test_automod_logger_idem")
    handler_count = len(logger1.handlers)
    logger2 = setup_logger("test_automod_logger_idem")
    assert logger1 is logger2
    assert len(logger2.handlers) == handler_count


def test_color_formatter_applies_color():
    formatter = ColorFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("test", logging.ERROR, "", 0, "error occurred", None, None)
    formatted = formatter.format(record)
    assert formatted.startswith("\033[31m")
    assert formatted.endswith(logger_module.RESET_COLOR)


def test_should_use_color_follows_tty(monkeypatch):
    monkeypatch.setattr("sys.stderr", DummyStream(tty=True))
    assert should_use_color() is True
    monkeypatch.setattr("sys.stderr", DummyStream(tty=False))
    assert should_use_color() is False


def test_log_filepath_is_shared_per_session():
    first = get_log_filepath()
    assert first.parent.exists()
    assert get_log_filepath() == first


def test_handle_exception_logs_error(caplog):
    class DummyException(Exception):
        pass

    with caplog.at_level(logging.ERROR):
        try:
            raise DummyException("fail")
        except DummyException as exc:
            handle_exception(DummyException, exc, exc.__traceback__)
    assert any("Uncaught exception" in r.message for r in caplog.records)
