import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = 'INFO', log_file: Optional[str] = 'backend.log') -> logging.Logger:
    """
    Sets up backend logging.

    Log output goes to stderr and, if given, a UTF-8 log file. stdout is
    reserved for JSON-RPC responses.
    """
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
    return logging.getLogger('chart_backend')
