"""
Rate limiting shared by every blueprint.

The global Limiter is created unbound; ``create_app`` binds it with
``limiter.init_app(app)`` and switches it off when RATE_LIMIT_ENABLED=0.
"""

import os

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from parlor_booking.core.config import RATE_LIMIT_DEFAULT

# Global Limiter instance to be imported by controllers
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT_DEFAULT],
    storage_uri=os.getenv("LIMITER_STORAGE_URI", "memory://"),
    enabled=True,  # Overridden in create_app from RATE_LIMIT_ENABLED
)
