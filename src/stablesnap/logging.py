"""
The package-wide logger. Messages are written to stderr and do not propagate to the root logger.
The level defaults to INFO, e.g. `logging.getLogger("stablesnap").setLevel(logging.DEBUG)` enables
chunk-level tracing.
"""

import logging

logger = logging.getLogger("stablesnap")
logger.propagate = False
logger.setLevel(logging.INFO)
logger.addHandler(logging.StreamHandler())
