"""Rate limiter shared by main.py and the routers.

Kept out of main.py so routers can decorate endpoints without circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Limits used by the auth endpoints
REGISTER_LIMIT = "5/minute"
LOGIN_LIMIT = "10/minute"
PASSWORD_RESET_LIMIT = "3/hour"

limiter = Limiter(key_func=get_remote_address)
