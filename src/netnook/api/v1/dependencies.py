"""Shared API dependencies and result mapping."""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from netnook.services.results import ActionResult, FailureReason
from netnook.services.runtime import FeedRuntime, get_runtime

_STATUS_BY_REASON = {
    FailureReason.INVALID: status.HTTP_400_BAD_REQUEST,
    FailureReason.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    FailureReason.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureReason.CONFLICT: status.HTTP_409_CONFLICT,
    FailureReason.OFFLINE: status.HTTP_503_SERVICE_UNAVAILABLE,
    FailureReason.REJECTED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_runtime_dep() -> FeedRuntime:
    """Return the shared feed runtime."""
    return get_runtime()


# Type alias for runtime dependency
RuntimeDep = Annotated[FeedRuntime, Depends(get_runtime_dep)]


def raise_for_result(result: ActionResult) -> ActionResult:
    """Convert an unsuccessful action into an HTTP error.

    Args:
        result: Outcome returned by a lifecycle or interaction action

    Returns:
        The same result when it succeeded

    Raises:
        HTTPException: If the action did not take effect
    """
    if result.ok:
        return result
    code = _STATUS_BY_REASON.get(result.reason, status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=code, detail=result.message)
