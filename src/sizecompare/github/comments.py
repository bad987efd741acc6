"""Find-or-create upsert of the size report comment on a pull request."""

import logging
from typing import Protocol

import httpx

from .client import IssueComment
from ..report.render import SIZE_COMPARE_HEADING

logger = logging.getLogger(__name__)


class CommentClient(Protocol):
    async def list_comments(self, issue_number: int) -> list[IssueComment]: ...

    async def create_comment(self, issue_number: int, body: str) -> int: ...

    async def update_comment(self, comment_id: int, body: str) -> None: ...


async def find_existing(client: CommentClient, pr_number: int) -> int | None:
    """Return the id of the first comment whose body starts with the report heading."""
    for comment in await client.list_comments(pr_number):
        if comment.body.startswith(SIZE_COMPARE_HEADING):
            return comment.id
    return None


async def upsert_comment(client: CommentClient, pr_number: int, body: str) -> bool:
    """Overwrite the previous report on the pull request, or create one if there is none.

    Failures to write the comment, whether refused by the server or lost in transport, are
    logged and swallowed so that other pull requests still get their report. Tokens of pull
    requests opened from forks typically have no write permission.

    Returns:
        True if the comment was written, False if writing failed
    """
    comment_id = await find_existing(client, pr_number)

    if comment_id is not None:
        logger.info(f"Found previous comment on PR #{pr_number}. Updating: {comment_id}")
        try:
            await client.update_comment(comment_id, body)
        except httpx.HTTPError as e:
            logger.warning(f"Error updating comment on PR #{pr_number}. This can happen for pull requests "
                           f"originating from a fork without write permissions: {e}")
            return False
    else:
        logger.info(f"No previous comment found on PR #{pr_number}. Creating new")
        try:
            await client.create_comment(pr_number, body)
        except httpx.HTTPError as e:
            logger.warning(f"Error creating comment on PR #{pr_number}. This can happen for pull requests "
                           f"originating from a fork without write permissions: {e}")
            return False

    return True
