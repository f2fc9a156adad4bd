from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from app.config.config import settings


def caller_key(request: Request) -> str:
    """Rate-limit per bearer token when present, otherwise per client address."""
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        return f"token:{token[-16:]}"
    return get_remote_address(request)


limiter = Limiter(key_func=caller_key, enabled=not settings.TEST)
