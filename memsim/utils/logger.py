from __future__ import annotations

import logging
from typing import Union

LOG_FORMAT = '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s'


def configure_logging(level: Union[int, str] = logging.WARNING) -> None:
    """Route memsim log records to stderr. Library modules never call this."""
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
