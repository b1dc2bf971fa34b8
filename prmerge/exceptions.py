"""prmerge exception classes."""


class PrMergeError(Exception):
    """Base exception for all prmerge errors."""

    def __init__(
        self, code: str, message: str, request_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(PrMergeError):
    """Raised when client configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class AuthenticationError(PrMergeError):
    """Raised when the token is missing or rejected."""

    pass


class AuthorizationError(PrMergeError):
    """Raised when access is denied."""

    pass


class NotFoundError(PrMergeError):
    """Raised when a resource is not found."""

    pass


class ConflictError(PrMergeError):
    """Raised on conflicts (head moved, merge already in progress, etc.)."""

    pass


class RateLimitedError(PrMergeError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        request_id: str | None = None,
    ) -> None:
        super().__init__(code, message, request_id)
        self.retry_after = retry_after


class ValidationError(PrMergeError):
    """Raised on validation errors."""

    pass


class ServerError(PrMergeError):
    """Raised on server errors (5xx) and connection failures."""

    pass


class GraphQLError(PrMergeError):
    """Raised when a GraphQL response carries an ``errors`` array."""

    pass


class GitError(PrMergeError):
    """Raised when a local git command fails."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__("GIT_ERROR", message)
        self.stderr = stderr


class MergeUsageError(PrMergeError):
    """Raised on invalid flag combinations, before any I/O."""

    def __init__(self, message: str) -> None:
        super().__init__("USAGE_ERROR", message)


class MergeBlockedError(PrMergeError):
    """
    Raised when the pull request's state prevents the requested action.

    Carries remediation lines the CLI prints instead of a traceback.
    """

    def __init__(
        self, code: str, message: str, remediation: list[str] | None = None
    ) -> None:
        super().__init__(code, message)
        self.remediation = remediation or []


class MergeCancelledError(PrMergeError):
    """Raised when the user cancels an interactive step."""

    def __init__(self) -> None:
        super().__init__("CANCELLED", "Cancelled.")


class NoSuchPromptError(PrMergeError):
    """Raised when a prompt is requested that the session did not expect."""

    def __init__(self, prompt: str) -> None:
        super().__init__("NO_SUCH_PROMPT", f"no such prompt: {prompt!r}")
        self.prompt = prompt
