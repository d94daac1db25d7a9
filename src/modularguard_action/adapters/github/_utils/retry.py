# _utils/retry.py

import random

import httpx

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset(
    {
        httpx.codes.TOO_MANY_REQUESTS,  # 429
        httpx.codes.INTERNAL_SERVER_ERROR,  # 500
        httpx.codes.BAD_GATEWAY,  # 502
        httpx.codes.SERVICE_UNAVAILABLE,  # 503
        httpx.codes.GATEWAY_TIMEOUT,  # 504
    },
)


def is_retryable(response: httpx.Response) -> bool:
    """
    Check whether a response signals a transient failure worth retrying.

    Returns:
        bool: True for rate limiting and gateway style server errors.
    """
    return response.status_code in RETRYABLE_STATUS_CODES


def retry_delay(
    attempt: int,
    response: httpx.Response | None = None,
    *,
    base: float = 1.0,
    cap: float = 30.0,
    jitter: float = 0.10,
) -> float:
    """
    Compute how long to wait before retry number `attempt` (starting at 1).

    A numeric Retry-After header on the response wins, bounded by the cap.
    Otherwise the delay doubles from the base on every attempt, with jitter
    applied as a fraction of the delay.

    Returns:
        float: Delay in seconds, never negative and never above the cap.
    """
    retry_after = _retry_after_seconds(response)
    if retry_after is not None:
        return min(retry_after, cap)

    delay = min(base * 2 ** (attempt - 1), cap)
    delta = delay * jitter * (2 * random.random() - 1)
    return max(0.0, min(delay + delta, cap))


def _retry_after_seconds(response: httpx.Response | None) -> float | None:
    if response is None:
        return None

    header = response.headers.get("Retry-After")
    try:
        return max(0.0, float(header)) if header is not None else None
    except ValueError:
        return None
