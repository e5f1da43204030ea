"""Custom exceptions for TikSnap."""

from tiksnap.utils.config import (
    ANTI_BOT_MESSAGE,
    RATE_LIMIT_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
)


class TikSnapError(Exception):
    """Base exception for TikSnap."""
    pass


class UserNotFoundError(TikSnapError):
    """Profile does not exist or is not accessible."""

    def __init__(self, message: str = USER_NOT_FOUND_MESSAGE):
        super().__init__(message)


class UserLookupError(TikSnapError):
    """User lookup failed for a reason other than a missing profile."""
    pass


class FetchError(TikSnapError):
    """Failed to fetch a page of posts."""
    pass


class RetryableFetchError(FetchError):
    """A page fetch failure that may succeed when retried."""
    pass


class EmptyResponseError(RetryableFetchError):
    """TikTok answered with an empty or unusable body."""

    def escalate(self) -> FetchError:
        return AntiBotBlockedError()


class RateLimitedError(RetryableFetchError):
    """Rate limited by TikTok (HTTP 429)."""

    def escalate(self) -> FetchError:
        return RateLimitExceededError()


class TransientFetchError(RetryableFetchError):
    """Network error or unexpected HTTP status."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class PostsNotFoundError(FetchError):
    """TikTok reports the requested user or post list as not found."""

    def __init__(self, message: str = USER_NOT_FOUND_MESSAGE):
        super().__init__(message)


class AntiBotBlockedError(FetchError):
    """Repeated empty responses, most likely blocked by anti-bot protection."""

    def __init__(self, message: str = ANTI_BOT_MESSAGE):
        super().__init__(message)


class RateLimitExceededError(FetchError):
    """Still rate limited after repeated attempts."""

    def __init__(self, message: str = RATE_LIMIT_MESSAGE):
        super().__init__(message)


class SignerLoadError(TikSnapError):
    """The configured request signer could not be imported."""
    pass
