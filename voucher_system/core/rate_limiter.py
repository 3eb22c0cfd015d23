from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address


def account_or_remote_address(request: Request) -> str:
    """Rate limit per calling account, falling back to the client address."""
    account_id = request.headers.get("X-Account-ID")
    if account_id:
        return f"account:{account_id.strip()}"
    return get_remote_address(request)


limiter = Limiter(key_func=account_or_remote_address)
