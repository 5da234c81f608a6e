"""Shared slowapi limiter, keyed on the client address.

Routes opt in with ``@limiter.limit(...)``; ``POST /auth/login`` uses
``settings.LOGIN_RATE_LIMIT``. Counters live in process memory.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
