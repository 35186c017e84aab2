"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Shared helpers: retry with exponential backoff, date
             helpers and sequential code generation.
-------------------------------------------------------------------------
"""
import logging
import time
from datetime import date
from typing import Callable, Optional, Tuple, Type, TypeVar

from apps.core.exceptions import RetryExhaustedException

logger = logging.getLogger(__name__)

T = TypeVar('T')


def retry_with_backoff(
    func: Callable[[], T],
    retries: int = 3,
    base_delay: float = 0.5,
    multiplier: float = 2.0,
    max_delay: float = 10.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``func`` until it succeeds or the attempts run out.

    After a failed attempt ``n`` (0-based) the helper sleeps
    ``min(max_delay, base_delay * multiplier ** n)`` seconds. Exceptions
    outside ``exceptions`` propagate immediately.

    Args:
        func: Zero-argument callable to invoke.
        retries: Total number of attempts (at least 1).
        base_delay: Delay after the first failure, in seconds.
        multiplier: Growth factor applied per attempt.
        max_delay: Upper bound for a single delay.
        exceptions: Exception types that trigger a retry.
        sleep: Sleep function (injectable for tests).

    Returns:
        The return value of ``func``.

    Raises:
        RetryExhaustedException: If every attempt failed.
    """
    attempts = max(1, retries)
    last_error: Optional[BaseException] = None

    for attempt in range(attempts):
        try:
            return func()
        except exceptions as exc:
            last_error = exc
            if attempt == attempts - 1:
                break
            delay = min(max_delay, base_delay * (multiplier ** attempt))
            logger.warning(
                "Attempt %s/%s failed (%s); retrying in %.2fs",
                attempt + 1, attempts, exc, delay
            )
            sleep(delay)

    raise RetryExhaustedException(
        f"Operation failed after {attempts} attempts: {last_error}",
        details={'attempts': attempts, 'last_error': str(last_error)}
    ) from last_error


def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
    """
    Return the age in completed years on ``today``.

    The birthday in the current year must have passed (or be today)
    for the year to count.
    """
    if today is None:
        from django.utils import timezone
        today = timezone.localdate()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def next_sequence_code(queryset, field: str, prefix: str, width: int = 5) -> str:
    """
    Generate the next sequential code such as ``BEN-00042``.

    Looks at the highest existing code with the same prefix in the
    queryset and increments its numeric suffix.
    """
    last = queryset.filter(
        **{f'{field}__startswith': prefix}
    ).order_by(f'-{field}').values_list(field, flat=True).first()

    next_number = 1
    if last:
        suffix = last[len(prefix):]
        if suffix.isdigit():
            next_number = int(suffix) + 1
    return f"{prefix}{next_number:0{width}d}"
