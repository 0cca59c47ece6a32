from fastapi import Request

MAX_USER_AGENT_LENGTH = 200


def extract_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for", "").strip()
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def describe_client(request: Request) -> str:
    """Short ``ip (user-agent)`` label used in auth log lines."""
    user_agent = request.headers.get("user-agent", "").strip()[:MAX_USER_AGENT_LENGTH]
    client_ip = extract_client_ip(request)
    return f"{client_ip} ({user_agent})" if user_agent else client_ip
