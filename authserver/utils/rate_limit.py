from slowapi import Limiter
from slowapi.util import get_remote_address

from authserver.config import settings

# key = client IP; auth routes are called before we know who the user is
limiter = Limiter(key_func=get_remote_address)

def per_minute(multiplier: int = 1) -> str:
    return f"{settings.RATE_AUTH_PER_MIN * multiplier}/minute"
