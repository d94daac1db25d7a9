# github/client.py

import httpx

from modularguard_action import __version__

_TIMEOUT = httpx.Timeout(30.0, connect=10.0)


def make_client(
    token: str,
    api_url: str = "https://api.github.com",
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create an async HTTP client authenticated against the GitHub REST API.

    Relative request paths resolve against `api_url`. Redirects are followed
    because release assets are served from a different host.

    Args:
        token (str): Token with `pull-requests: write` and `checks: write`.
        api_url (str): Base URL of the REST API.
        transport (httpx.AsyncBaseTransport | None): Optional transport,
            used by tests to stub the network.

    Returns:
        httpx.AsyncClient: A configured client; the caller must close it.
    """
    return httpx.AsyncClient(
        base_url=api_url,
        headers={
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "User-Agent": f"modularguard-action/{__version__}",
            "X-GitHub-Api-Version": "2022-11-28",
        },
        timeout=_TIMEOUT,
        follow_redirects=True,
        transport=transport,
    )
