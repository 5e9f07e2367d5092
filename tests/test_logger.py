from __future__ import annotations

import logging
from pathlib import Path

from dbmreader.core.logger import setup_logging


def test_setup_logging_writes_module_loggers_to_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "reader.log"
    logger = setup_logging(log_file, level="WARNING", log_to_console=False)

    logging.getLogger("dbmreader.cache.page_store").debug("index rewritten")
    for handler in logger.handlers:
        handler.flush()

    assert "index rewritten" in log_file.read_text(encoding="utf-8")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
