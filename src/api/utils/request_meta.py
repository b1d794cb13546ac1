from typing import Optional

from fastapi import Request


def client_ip(request: Request) -> str:
    """
    Observed caller IP.

    First X-Forwarded-For hop, then X-Real-IP, then the socket peer.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def user_agent(request: Request) -> Optional[str]:
    return request.headers.get("user-agent") or None
