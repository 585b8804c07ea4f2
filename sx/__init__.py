"""sx - search the web from the command line."""

from loguru import logger

__version__ = "2.1.0"

# Library logging stays silent until the CLI enables it with --debug.
logger.disable("sx")
