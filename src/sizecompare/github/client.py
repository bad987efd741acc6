"""Asynchronous client for the parts of the GitHub REST API the size comparison uses."""

import logging
from typing import Any, NamedTuple

import httpx

from ..errors import RefNotFound

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://api.github.com'


class PullRequest(NamedTuple):
    number: int
    draft: bool
    base_ref: str
    head_ref: str


class IssueComment(NamedTuple):
    id: int
    body: str


class GitHubClient:
    """Thin wrapper around httpx.AsyncClient bound to one repository.

    HTTP errors surface as httpx.HTTPStatusError; callers decide which of them are fatal.
    """

    def __init__(self, token: str, repository: str, *, api_url: str = DEFAULT_API_URL,
                 transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the client.

        Args:
            token: Token sent as a bearer credential
            repository: Repository in 'owner/name' form
            api_url: Base URL of the REST API
            transport: Optional httpx transport, used to substitute the network in tests
        """
        self.repository = repository
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip('/'),
            headers={
                'Authorization': f'Bearer {token}',
                'Accept': 'application/vnd.github+json',
                'X-GitHub-Api-Version': '2022-11-28',
            },
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = await self._client.request(method, path, **kwargs)
        response.raise_for_status()
        return response

    async def _paginate(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        """Collect all items of a list endpoint by following the 'next' links."""
        items: list[Any] = []
        response = await self._request('GET', path, params={'per_page': 100, **(params or {})})
        items.extend(response.json())
        while 'next' in response.links:
            response = await self._request('GET', response.links['next']['url'])
            items.extend(response.json())
        return items

    async def list_pull_requests(self) -> list[PullRequest]:
        """List open pull requests of the repository."""
        data = await self._paginate(f'/repos/{self.repository}/pulls', {'state': 'open'})
        return [
            PullRequest(
                number=item['number'],
                draft=bool(item.get('draft', False)),
                base_ref=item['base']['ref'],
                head_ref=item['head']['ref'],
            )
            for item in data
        ]

    async def latest_commit_sha(self, ref: str) -> str:
        """Resolve the SHA of the newest commit on a branch or other ref.

        Raises:
            RefNotFound: The ref has no commits
        """
        response = await self._request('GET', f'/repos/{self.repository}/commits', params={'sha': ref, 'per_page': 1})
        commits = response.json()
        if not commits:
            raise RefNotFound(ref)
        return commits[0]['sha']

    async def list_comments(self, issue_number: int) -> list[IssueComment]:
        data = await self._paginate(f'/repos/{self.repository}/issues/{issue_number}/comments')
        return [IssueComment(item['id'], item.get('body') or '') for item in data]

    async def create_comment(self, issue_number: int, body: str) -> int:
        response = await self._request(
            'POST', f'/repos/{self.repository}/issues/{issue_number}/comments', json={'body': body})
        return response.json()['id']

    async def update_comment(self, comment_id: int, body: str) -> None:
        await self._request('PATCH', f'/repos/{self.repository}/issues/comments/{comment_id}', json={'body': body})
