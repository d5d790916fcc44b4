"""Package logger. Flagset never installs handlers; applications configure logging."""
import logging

logger = logging.getLogger("flagset")

__all__ = ("logger",)
