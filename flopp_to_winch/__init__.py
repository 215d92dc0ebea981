"""Rebuild ND filesystem images from WINCH-TO-FLOPP backup volumes."""

from loguru import logger

from .__version__ import __version__

# Silent as a library; setup_logging() turns records back on
logger.disable(__name__)

__all__ = ["__version__"]
