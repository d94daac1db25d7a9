# domain/comments.py

import logging
from typing import Literal

import httpx

from modularguard_action.adapters.github import (
    create_issue_comment,
    list_issue_comments,
    update_issue_comment,
)
from modularguard_action.errors import PublicationError

from .formatting import COMMENT_MARKER

logger = logging.getLogger(__name__)


async def find_existing_comment(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    issue_number: int,
) -> int | None:
    """
    Find the comment left on a pull request by a previous run.

    A comment matches when its body contains COMMENT_MARKER. The first match
    in listing order wins. Lookup failures are logged and treated as "no
    comment", so the caller posts a new one instead of failing.

    Known limitation: a human comment quoting the marker would be picked up
    and overwritten.

    Returns:
        int | None: Id of the matching comment, or None.
    """
    try:
        comments = await list_issue_comments(client, owner, repo, issue_number)
    except (httpx.HTTPError, ValueError) as error:
        logger.warning("Failed to find existing comment: %s", error)
        return None

    return next(
        (
            comment["id"]
            for comment in comments
            if COMMENT_MARKER in (comment.get("body") or "")
        ),
        None,
    )


async def create_or_update_comment(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    issue_number: int,
    body: str,
    existing_comment_id: int | None = None,
) -> None:
    """
    Update the given comment in place, or create a new one when no id is
    given.

    Returns:
        None

    Raises:
        PublicationError: If the API call fails.
    """
    action = "update" if existing_comment_id is not None else "create"

    try:
        if existing_comment_id is not None:
            await update_issue_comment(client, owner, repo, existing_comment_id, body)
        else:
            await create_issue_comment(client, owner, repo, issue_number, body)
    except (httpx.HTTPError, ValueError) as error:
        raise PublicationError(f"Failed to {action} comment: {error}") from error


async def publish_comment(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    issue_number: int,
    body: str,
) -> Literal["created", "updated"]:
    """
    Upsert the results comment on one pull request.

    Returns:
        Literal["created", "updated"]: What happened to the comment.

    Raises:
        PublicationError: If creating or updating the comment fails.
    """
    existing_id = await find_existing_comment(client, owner, repo, issue_number)

    await create_or_update_comment(
        client,
        owner,
        repo,
        issue_number,
        body,
        existing_id,
    )

    return "created" if existing_id is None else "updated"
