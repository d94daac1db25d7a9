# github/__init__.py

from .api import (
    create_check_run,
    create_issue_comment,
    get_latest_release_tag,
    list_issue_comments,
    list_pull_requests_for_commit,
    update_issue_comment,
)
from .client import make_client

__all__ = [
    "create_check_run",
    "create_issue_comment",
    "get_latest_release_tag",
    "list_issue_comments",
    "list_pull_requests_for_commit",
    "make_client",
    "update_issue_comment",
]
