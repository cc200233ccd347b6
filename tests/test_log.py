import logging

from jobmatch.log import PACKAGE_LOGGER, configure, get_logger


def test_loggers_live_under_package_namespace():
    assert get_logger("jobmatch.engine").name == "jobmatch.engine"
    assert get_logger("__main__").name == "jobmatch.__main__"


def test_configure_sets_level():
    configure(level="debug", log_file=False)
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
    configure(level="INFO", log_file=False)
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.INFO
