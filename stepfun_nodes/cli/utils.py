"""
Helpers shared by the stepfun-nodes commands
"""
import json
import logging
from typing import Any

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(debug: bool, logger_name: str) -> logging.Logger:
    """
    Configure root logging for a command group and return its logger

    Debug mode lowers the level to DEBUG, which also shows the request
    traces of the host and the nodes.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("stepfun_nodes").setLevel(level)

    logger = logging.getLogger(logger_name)
    logger.debug("Debug logging enabled for %s", logger_name)
    return logger


def dump_json(data: Any) -> str:
    """Format JSON output for the terminal"""
    return json.dumps(data, ensure_ascii=False, indent=2)
