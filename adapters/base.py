"""
Base adapter interface for the hosting platform.

Defines the contract the gating pipeline needs from the platform API,
so that checks, merge policy and publication never talk to a concrete
client directly.
"""

from abc import ABC, abstractmethod

from models.platform import ChangedFile, PullRequestContext, Review


class PlatformAPIError(Exception):
    """Raised when a call to the hosting platform fails for any reason."""


class GitPlatformAdapter(ABC):
    """
    Abstract base class for hosting platform adapters.

    Every method that talks to the platform raises PlatformAPIError on
    failure; callers decide whether that failure is fatal.
    """

    @abstractmethod
    def list_files(self, context: PullRequestContext) -> list[ChangedFile]:
        """
        List files changed by the pull request.

        Args:
            context: Pull request identity

        Returns:
            Changed files with their added-line counts

        Raises:
            PlatformAPIError: If the API call fails
        """
        pass

    @abstractmethod
    def list_reviews(self, context: PullRequestContext) -> list[Review]:
        """
        List submitted reviews for the pull request.

        Raises:
            PlatformAPIError: If the API call fails
        """
        pass

    @abstractmethod
    def get_head_sha(self, context: PullRequestContext) -> str:
        """
        Fetch pull request detail and return its head commit SHA.

        Returns:
            Head SHA, or an empty string if the platform reports none

        Raises:
            PlatformAPIError: If the API call fails
        """
        pass

    @abstractmethod
    def create_status(
        self,
        context: PullRequestContext,
        sha: str,
        state: str,
        description: str,
        status_context: str,
    ) -> None:
        """
        Create a commit status on the given SHA.

        Raises:
            PlatformAPIError: If the API call fails
        """
        pass

    @abstractmethod
    def create_comment(self, context: PullRequestContext, body: str) -> None:
        """
        Post a new comment on the pull request conversation.

        Raises:
            PlatformAPIError: If the API call fails
        """
        pass

    @abstractmethod
    def verify_signature(self, payload: bytes, signature: str, secret: str) -> bool:
        """
        Verify webhook signature for HMAC-SHA256.

        Args:
            payload: Raw request body bytes
            signature: Signature header value
            secret: Webhook secret for verification

        Returns:
            True if signature is valid, False otherwise
        """
        pass
