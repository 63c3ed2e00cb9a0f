"""Application-wide logger.

Routers and services log through the shared ``logger`` bound to
``uvicorn.error`` so that coverage, move and settings messages show up in the
server output next to request logs.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("uvicorn.error")
