import logging

import pytest

from lasraster.utils.logging import PACKAGE_LOGGER, get_logger, log_stage, setup_logging


def test_get_logger_is_namespaced() -> None:
    assert get_logger("lasraster.cli").name == "lasraster.cli"
    assert get_logger("tests").name == "lasraster.tests"


@pytest.mark.parametrize(
    "verbose, quiet, level",
    [(False, False, logging.INFO), (True, False, logging.DEBUG), (False, True, logging.WARNING)],
)
def test_setup_logging_levels(verbose: bool, quiet: bool, level: int) -> None:
    setup_logging(verbose=verbose, quiet=quiet)
    logger = logging.getLogger(PACKAGE_LOGGER)
    assert logger.level == level
    assert len(logger.handlers) == 1


def test_log_stage_reports_failure(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger=PACKAGE_LOGGER)
    logger = get_logger("stage")

    with log_stage(logger, "Sorting"):
        pass
    with pytest.raises(RuntimeError):
        with log_stage(logger, "Writing"):
            raise RuntimeError("disk full")

    messages = [record.getMessage() for record in caplog.records]
    assert "Sorting..." in messages
    assert any(m.startswith("Sorting finished in") for m in messages)
    assert any(m.startswith("Writing failed after") for m in messages)
