# github/api.py

import asyncio
import logging

import httpx

from modularguard_action.schemas import CheckRunPayload

from ._utils import is_retryable, retry_delay

logger = logging.getLogger(__name__)

# GETs are retried; writes are sent exactly once.
_MAX_GET_ATTEMPTS = 4
_RETRY_BASE_DELAY = 1.0

_PAGE_SIZE = 100


async def list_pull_requests_for_commit(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    sha: str,
) -> list[dict]:
    """
    List the pull requests associated with a commit.

    Returns:
        list[dict]: Pull request objects as returned by the REST API, in
            listing order. Empty when the commit belongs to no pull request.
    """
    return await _get_all_pages(
        client,
        f"/repos/{owner}/{repo}/commits/{sha}/pulls",
    )


async def get_latest_release_tag(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
) -> str:
    """
    Fetch the tag name of the newest published release of a repository.

    Returns:
        str: The release tag, for example `v1.4.0`.

    Raises:
        httpx.HTTPStatusError: If the release cannot be fetched.
        KeyError: If the response carries no tag_name.
    """
    response = await _get_with_retry(client, f"/repos/{owner}/{repo}/releases/latest")
    return response.json()["tag_name"]


async def list_issue_comments(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    issue_number: int,
) -> list[dict]:
    """
    List every comment on an issue or pull request, following pagination.

    Returns:
        list[dict]: Comment objects in the order the API returns them.
    """
    return await _get_all_pages(
        client,
        f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
    )


async def create_issue_comment(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    issue_number: int,
    body: str,
) -> dict:
    """
    Post a new comment on an issue or pull request.

    Returns:
        dict: The created comment.
    """
    response = await client.post(
        f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
        json={"body": body},
    )
    response.raise_for_status()
    return response.json()


async def update_issue_comment(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    comment_id: int,
    body: str,
) -> dict:
    """
    Replace the body of an existing issue comment.

    Returns:
        dict: The updated comment.
    """
    response = await client.patch(
        f"/repos/{owner}/{repo}/issues/comments/{comment_id}",
        json={"body": body},
    )
    response.raise_for_status()
    return response.json()


async def create_check_run(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    head_sha: str,
    payload: CheckRunPayload,
) -> dict:
    """
    Create a completed check run with its output and annotations.

    Returns:
        dict: The created check run.
    """
    response = await client.post(
        f"/repos/{owner}/{repo}/check-runs",
        json={
            "head_sha": head_sha,
            "status": "completed",
            **payload.model_dump(mode="json", exclude_none=True),
        },
    )
    response.raise_for_status()
    return response.json()


async def _get_all_pages(client: httpx.AsyncClient, url: str) -> list[dict]:
    """
    Collect every item of a paginated list endpoint by following the `next`
    relation of the Link header.

    Returns:
        list[dict]: Items from all pages, in order.
    """
    items: list[dict] = []
    next_url: str | None = url
    params: dict[str, int] | None = {"per_page": _PAGE_SIZE}

    while next_url:
        response = await _get_with_retry(client, next_url, params=params)
        items.extend(response.json())

        # the next link already carries the query string
        next_url = response.links.get("next", {}).get("url")
        params = None

    return items


async def _get_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, int] | None = None,
) -> httpx.Response:
    """
    Perform a GET request, retrying transport errors and retryable status
    codes with exponential backoff.

    Returns:
        httpx.Response: The first non-retryable response.

    Raises:
        httpx.HTTPStatusError: If the final response is an error.
        httpx.TransportError: If the last attempt fails at transport level.
    """
    for attempt in range(1, _MAX_GET_ATTEMPTS + 1):
        last_attempt = attempt == _MAX_GET_ATTEMPTS

        try:
            response = await client.get(url, params=params)
        except httpx.TransportError as error:
            if last_attempt:
                raise
            delay = retry_delay(attempt, base=_RETRY_BASE_DELAY)
            logger.debug(
                "GitHub request to %s failed (%s). Retrying in %.1fs",
                url,
                error,
                delay,
            )
            await asyncio.sleep(delay)
            continue

        if not is_retryable(response) or last_attempt:
            break

        delay = retry_delay(attempt, response, base=_RETRY_BASE_DELAY)
        logger.debug(
            "RATE_LIMIT: GitHub returned %d for %s. Retrying in %.1fs (attempt %d/%d)",
            response.status_code,
            url,
            delay,
            attempt,
            _MAX_GET_ATTEMPTS,
        )
        await asyncio.sleep(delay)

    response.raise_for_status()
    return response
