"""
api/limiter.py -- Shared slowapi rate limiter instance.

Imported by api/main.py (to mount as middleware) and by the route modules
(to apply per-route limits with @limiter.limit()). A single shared instance
means all routes count against the same in-memory store.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")

# Applied to the credential-guessing and mail-triggering endpoints.
LOGIN_RATE_LIMIT = get_settings().login_rate_limit
