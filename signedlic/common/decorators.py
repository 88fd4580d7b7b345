"""License decorators for function protection.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

from signedlic.client.domain.entities import PurchasedLicense, TrialLicense
from signedlic.common.exceptions import LicenseLoadError, LicenseRequiredError

logger = logging.getLogger(__name__)


def _resolve_client(license_client: Any, args: tuple[Any, ...]) -> Any:
    """Client instance, attribute name on ``self``, or zero-arg factory."""
    if isinstance(license_client, str):
        if not args:
            msg = f"Cannot get client attribute '{license_client}' without self"
            raise ValueError(msg)
        return getattr(args[0], license_client)
    if callable(license_client) and not hasattr(license_client, "load_license"):
        return license_client()
    return license_client


def _check_license(
    client: Any, *, allow_trial: bool, allow_expired_trial: bool
) -> str | None:
    """Return why the license is unacceptable, or None if it is fine."""
    try:
        license_ = client.load_license()
    except LicenseLoadError as err:
        return f"Stored license is invalid: {err.validation_error}"
    if license_ is None:
        return "No license has been activated"
    if isinstance(license_, TrialLicense):
        if not allow_trial:
            return "A purchased license is required"
        if not allow_expired_trial and license_.is_expired():
            return "Trial license has expired"
    elif not isinstance(license_, PurchasedLicense):
        return f"Unknown license type {type(license_).__name__}"
    return None


def requires_license(
    license_client: Any | Callable[[], Any] | str,
    *,
    allow_trial: bool = True,
    allow_expired_trial: bool = False,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that runs the function only with an acceptable license.

    Args:
        license_client: LicenseClient instance, a callable returning one, or
            the name of an attribute holding one on the method's ``self``
        allow_trial: Whether a trial license is acceptable
        allow_expired_trial: Whether an expired trial is acceptable
        raise_exception: Whether to raise LicenseRequiredError or return None

    Returns:
        Decorated function that only executes with an acceptable license
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            client = _resolve_client(license_client, args)
            problem = _check_license(
                client,
                allow_trial=allow_trial,
                allow_expired_trial=allow_expired_trial,
            )
            if problem is not None:
                if raise_exception:
                    raise LicenseRequiredError(problem)
                logger.warning("License check failed: %s", problem)
                return None
            return func(*args, **kwargs)

        return wrapper

    return decorator


def requires_purchased_license(
    license_client: Any | Callable[[], Any] | str,
    *,
    raise_exception: bool = True,
) -> Callable:
    """Shorthand for ``requires_license(..., allow_trial=False)``."""
    return requires_license(
        license_client, allow_trial=False, raise_exception=raise_exception
    )
