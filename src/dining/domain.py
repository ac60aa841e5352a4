"""Dining bounded context: establishment reviews, reactions and ranking.

Keeps each establishment's rating aggregate consistent with its reviews,
tracks like/dislike reactions per review, and ranks establishments by a
weighted score over ratings, reactions and recency.
"""

import os

from protean.domain import Domain

from dining.utils.db import install_transaction_hooks
from dining.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging(log_dir=os.getenv("LOG_DIR"))

# Get logger for this module
logger = get_logger(__name__)

# SQLite writers serialize on BEGIN IMMEDIATE
install_transaction_hooks()

# Domain Composition Root
dining = Domain(name="dining")
