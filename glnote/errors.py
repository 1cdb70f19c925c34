"""Error taxonomy. Every message here is shown to the user as-is."""


class GlnoteError(RuntimeError):
    """Base class for every failure glnote reports to the user."""


class ValidationError(GlnoteError):
    """Missing or malformed input: empty token, blank title, unexpected response shape."""


class GitLabAPIError(GlnoteError):
    """The GitLab API answered with an error status."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class AuthError(GitLabAPIError):
    pass


class PermissionDeniedError(GitLabAPIError):
    pass


class NotFoundError(GitLabAPIError):
    pass


class ServerError(GitLabAPIError):
    pass


class NetworkError(GlnoteError):
    """Transport failure before any response arrived."""


class RequestTimeoutError(GlnoteError):
    pass


class InvalidResponseError(GlnoteError):
    """A 2xx response is missing a field we need."""


class SelectionCancelled(GlnoteError):
    """The user closed the project picker without choosing."""


class DocumentReadError(GlnoteError):
    pass


class LocalWriteError(GlnoteError):
    """Writing the note back failed after the issue already exists remotely."""


def error_for_status(status: int, reason: str = "", detail: str | None = None) -> GitLabAPIError:
    """Map an HTTP error status to the matching taxonomy kind."""
    if status == 401:
        return AuthError(
            "Invalid or expired GitLab Personal Access Token. Please check your token in glnote settings.",
            status=status,
        )
    if status == 403:
        return PermissionDeniedError(
            'Access denied. Please ensure your token has "api" scope permissions.',
            status=status,
        )
    if status == 404:
        return NotFoundError(
            "Resource not found. Please verify the GitLab instance URL and your project access.",
            status=status,
        )
    if status >= 500:
        return ServerError("GitLab server error. Please try again later.", status=status)
    message = f"Request failed with status {status}"
    if reason:
        message += f": {reason}"
    if detail:
        message += f" ({detail})"
    return GitLabAPIError(message, status=status)
