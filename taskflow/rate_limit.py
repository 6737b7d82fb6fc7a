"""Request rate limiting keyed on the client address."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from taskflow.config import get_settings

limiter = Limiter(key_func=get_remote_address, default_limits=[get_settings().RATE_LIMIT_DEFAULT])
