import io
import logging

from xbelmarks.log import LogConfig, get_logger, setup_logging


def test_plain_handler_writes_to_given_stream():
    buf = io.StringIO()
    setup_logging(LogConfig(level="DEBUG", no_color=True, stream=buf))
    get_logger("xbelmarks.test").warning("lock held by %s", "someone")
    assert "WARNING xbelmarks.test: lock held by someone" in buf.getvalue()


def test_unknown_level_falls_back_to_info():
    buf = io.StringIO()
    handler = setup_logging(LogConfig(level="chatty", stream=buf))
    assert handler.level == logging.INFO
    assert len(logging.getLogger().handlers) == 1
