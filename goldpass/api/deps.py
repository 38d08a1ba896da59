"""Request-scoped helpers shared by the routers."""

from fastapi import Request

from goldpass.services import Services


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the process-wide service container."""
    return request.app.state.services


def client_ip(request: Request) -> str:
    """Best guess at the caller's IP, honoring proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client.host
    return "unknown"
