
from fastapi import Request
from src.core.constants import DEFAULT_PROXY_COUNT, DEFAULT_PROXY_HEADERS


def get_client_ip(
    request: Request,
    proxy_headers: list[str] | None = None,
    trusted_proxies: list[str] | None = None,
    proxy_count: int | None = None,
) -> str | None:
    """
    Extract the client IP address, honouring the usual proxy headers.
    """
    proxy_headers = proxy_headers or DEFAULT_PROXY_HEADERS
    proxy_count = proxy_count or DEFAULT_PROXY_COUNT

    for header_name in proxy_headers:
        if header_name not in request.headers:
            continue

        header_value = request.headers[header_name]

        if header_name == "X-Forwarded-For" and "," in header_value:
            ips = [ip.strip() for ip in header_value.split(",")]

            if not trusted_proxies:
                return ips[0]

            if ips[-1] in trusted_proxies:
                idx = -1 - proxy_count
                if abs(idx) <= len(ips):
                    return ips[idx]
        else:
            return header_value

    if request.client and request.client.host:
        return request.client.host

    return None


def get_user_agent(request: Request) -> str:
    return request.headers.get("User-Agent", "Unknown")

