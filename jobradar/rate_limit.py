"""Rate limiting singleton using slowapi.

Guards the endpoints that spend upstream LLM credit.
"""

from fastapi import Request
from slowapi import Limiter


def client_ip(request: Request) -> str:
    """Extract client IP, honouring X-Forwarded-For / X-Real-IP behind a reverse proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


limiter = Limiter(key_func=client_ip)
