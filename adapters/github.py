"""
GitHub platform adapter implementation.

Implements GitPlatformAdapter for GitHub on top of PyGithub, handling
changed-file and review listing, commit status and comment publication,
and webhook signature verification.
"""

import hashlib
import hmac

import requests
from github import Auth, Github, GithubException
from loguru import logger

from adapters.base import GitPlatformAdapter, PlatformAPIError
from models.platform import ChangedFile, PullRequestContext, Review


class GitHubAdapter(GitPlatformAdapter):
    """
    GitHub implementation of GitPlatformAdapter.

    Every PyGithub or transport failure is logged and re-raised as
    PlatformAPIError so callers only handle one exception type.
    """

    def __init__(self, token: str, signature_verification: bool = True):
        """
        Initialize GitHub adapter.

        Args:
            token: GitHub personal access token
            signature_verification: Enable/disable webhook signature verification
        """
        self.token = token
        self.signature_verification = signature_verification
        self.client = Github(auth=Auth.Token(token)) if token else Github()

    def _get_pull(self, context: PullRequestContext):
        repo = self.client.get_repo(context.full_name, lazy=True)
        return repo.get_pull(context.pr_number)

    def list_files(self, context: PullRequestContext) -> list[ChangedFile]:
        try:
            pr = self._get_pull(context)
            return [
                ChangedFile(filename=file.filename, additions=file.additions or 0)
                for file in pr.get_files()
            ]
        except (GithubException, requests.RequestException) as e:
            logger.error(f"GitHub API error listing files for {context.key}: {e}")
            raise PlatformAPIError(str(e)) from e

    def list_reviews(self, context: PullRequestContext) -> list[Review]:
        try:
            pr = self._get_pull(context)
            return [
                Review(
                    state=review.state or "",
                    reviewer=review.user.login if review.user else None,
                )
                for review in pr.get_reviews()
            ]
        except (GithubException, requests.RequestException) as e:
            logger.error(f"GitHub API error listing reviews for {context.key}: {e}")
            raise PlatformAPIError(str(e)) from e

    def get_head_sha(self, context: PullRequestContext) -> str:
        try:
            pr = self._get_pull(context)
            return pr.head.sha or ""
        except (GithubException, requests.RequestException) as e:
            logger.error(f"GitHub API error fetching {context.key}: {e}")
            raise PlatformAPIError(str(e)) from e

    def create_status(
        self,
        context: PullRequestContext,
        sha: str,
        state: str,
        description: str,
        status_context: str,
    ) -> None:
        try:
            repo = self.client.get_repo(context.full_name, lazy=True)
            # GitHub rejects descriptions longer than 140 characters
            repo.get_commit(sha).create_status(
                state=state,
                description=description[:140],
                context=status_context,
            )
            logger.info(f"Created commit status {state} on {sha[:7]} for {context.key}")
        except (GithubException, requests.RequestException) as e:
            logger.error(f"Failed to create GitHub status for {context.key}: {e}")
            raise PlatformAPIError(str(e)) from e

    def create_comment(self, context: PullRequestContext, body: str) -> None:
        try:
            pr = self._get_pull(context)
            pr.create_issue_comment(body)
            logger.info(f"Created review comment on {context.key}")
        except (GithubException, requests.RequestException) as e:
            logger.error(f"Failed to create GitHub comment for {context.key}: {e}")
            raise PlatformAPIError(str(e)) from e

    def verify_signature(self, payload: bytes, signature: str, secret: str) -> bool:
        """
        Verify GitHub webhook HMAC-SHA256 signature.

        Args:
            payload: Raw request body bytes
            signature: X-Hub-Signature-256 header value
            secret: Webhook secret

        Returns:
            True if signature valid or verification disabled, False otherwise
        """
        if not self.signature_verification:
            return True

        if not signature or not secret:
            logger.warning("Missing signature or secret for verification")
            return False

        # GitHub uses format: sha256=<hash>
        if not signature.startswith("sha256="):
            logger.warning(f"Invalid signature format: {signature[:20]}...")
            return False

        signature_hash = signature.split("=", 1)[1]

        expected = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()

        is_valid = hmac.compare_digest(expected, signature_hash)
        if not is_valid:
            logger.warning("Invalid GitHub webhook signature")

        return is_valid
