# tokenauth/services/_shared/base.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from tokenauth.core import errors as api_errors
from tokenauth.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ServiceError,
)
from tokenauth.uow.base import UnitOfWork
from tokenauth.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

Clock = Callable[[], datetime]
UnitOfWorkFactory = Callable[[], UnitOfWork]


def utc_now() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(UTC)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide a helper to run read-write units of work.
    * Centralize error translation and logging.
    * Expose an injectable clock so expiry logic is testable.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the base service.

        :param uow_factory: Callable returning a fresh Unit of Work; defaults
            to :class:`SQLAlchemyUnitOfWork`.
        :param clock: Callable returning the current aware UTC instant.
        """
        self._uow_factory: UnitOfWorkFactory = uow_factory or SQLAlchemyUnitOfWork
        self._clock: Clock = clock or utc_now
        self.log = logging.getLogger(type(self).__module__)

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> UnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Fresh UoW instance from the configured factory.
        :rtype: UnitOfWork
        """
        return self._uow_factory()

    def now_utc(self) -> datetime:
        return self._clock()

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, NotFoundError):
            # → 404 Not Found
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            # → 409 Conflict
            return api_errors.Conflict(str(exc))

        if isinstance(exc, AuthenticationError):
            # → 401 Unauthorized
            return api_errors.Unauthorized(str(exc))

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
