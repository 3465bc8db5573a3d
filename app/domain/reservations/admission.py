"""
Reservation admission - the create-reservation flow.

Each call walks one request through a fixed sequence of stages:

    authentication -> input shape -> tenant/calendar -> reservation type
    -> detail validation -> (booking rules) -> conflict check -> create

The first stage that fails ends the request with an ``AdmissionError`` whose
``kind`` tells the caller what went wrong; nothing is written on any
rejection path. Rejections are returned, not raised, so the flow can be
driven directly from tests with an in-memory store.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from ... import config
from ...auth import CallerIdentity
from ...models import IDEMPOTENCY_KEY_MAX_LENGTH, Calendar, Reservation, Tenant
from ...shared.validators import parse_iso_datetime
from ..calendars.rules import check_booking_rules
from .conflicts import ConflictChecker
from .repository import DuplicateReservationError, ReservationStore
from .schemas import ReservationTypeSchema
from .validation import validate_details

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PERMISSION_DENIED = "permission-denied"
    INVALID_ARGUMENT = "invalid-argument"
    NOT_FOUND = "not-found"
    FAILED_PRECONDITION = "failed-precondition"
    INTERNAL = "internal"


@dataclass(frozen=True)
class AdmissionError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class AdmissionSuccess:
    reservation_id: str
    status: str
    # True when an earlier reservation with the same idempotency key was returned
    replayed: bool = False


AdmissionResult = Union[AdmissionSuccess, AdmissionError]


@dataclass(frozen=True)
class AdmissionSettings:
    """Startup configuration for the admission flow"""

    enforce_booking_rules: bool = False
    enforce_capacity: bool = False

    @classmethod
    def from_config(cls) -> "AdmissionSettings":
        return cls(
            enforce_booking_rules=config.ENFORCE_BOOKING_RULES,
            enforce_capacity=config.ENFORCE_CALENDAR_CAPACITY,
        )


@dataclass(frozen=True)
class RequestContext:
    """Where a request came from, persisted as reservation metadata"""

    source: str = "api"
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    def as_metadata(self) -> dict:
        metadata = {"source": self.source}
        if self.ip_address:
            metadata["ipAddress"] = self.ip_address
        if self.user_agent:
            metadata["userAgent"] = self.user_agent
        return metadata


@dataclass(frozen=True)
class AdmissionRequest:
    tenant_id: str
    calendar_id: str
    start: datetime
    end: datetime
    details: dict
    reservation_type_key: Optional[str] = None
    idempotency_key: Optional[str] = None


def _invalid(message: str) -> AdmissionError:
    return AdmissionError(ErrorKind.INVALID_ARGUMENT, message)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_admission_request(payload: Any) -> Union[AdmissionRequest, AdmissionError]:
    """Check the request shape, reporting the first violated constraint"""
    if not isinstance(payload, Mapping):
        return _invalid("Request body must be an object")

    for name in ("tenantId", "calendarId"):
        value = payload.get(name)
        if not value or not isinstance(value, str):
            return _invalid(f"{name} is required and must be a string")
    for name in ("start", "end"):
        value = payload.get(name)
        if not value or not isinstance(value, str):
            return _invalid(f"{name} is required and must be an ISO 8601 string")
    details = payload.get("details")
    if details is None or not isinstance(details, Mapping):
        return _invalid("details is required and must be an object")

    type_key = payload.get("reservationTypeKey")
    if type_key is not None and not isinstance(type_key, str):
        return _invalid("reservationTypeKey must be a string")
    idempotency_key = payload.get("idempotencyKey")
    if idempotency_key is not None and (not isinstance(idempotency_key, str) or not idempotency_key):
        return _invalid("idempotencyKey must be a non-empty string")
    if idempotency_key and len(idempotency_key) > IDEMPOTENCY_KEY_MAX_LENGTH:
        return _invalid(
            f"idempotencyKey must be at most {IDEMPOTENCY_KEY_MAX_LENGTH} characters"
        )

    start = parse_iso_datetime(payload["start"])
    end = parse_iso_datetime(payload["end"])
    if start is None or end is None:
        return _invalid("Invalid date format. Use ISO 8601 format.")
    if end <= start:
        return _invalid("End time must be after start time")

    return AdmissionRequest(
        tenant_id=payload["tenantId"],
        calendar_id=payload["calendarId"],
        start=start,
        end=end,
        details=dict(details),
        reservation_type_key=type_key or None,
        idempotency_key=idempotency_key,
    )


class ReservationAdmissionService:
    """Admits or rejects new reservations against a ReservationStore"""

    def __init__(
        self,
        store: ReservationStore,
        settings: Optional[AdmissionSettings] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.settings = settings or AdmissionSettings()
        self.clock = clock
        self.conflicts = ConflictChecker(store)

    def admit(
        self,
        identity: Optional[CallerIdentity],
        payload: Any,
        context: Optional[RequestContext] = None,
    ) -> AdmissionResult:
        """Run the admission flow; unexpected failures become an Internal error"""
        try:
            result = self._admit(identity, payload, context or RequestContext())
        except Exception:
            logger.exception("❌ Unexpected error while admitting reservation")
            return AdmissionError(ErrorKind.INTERNAL, "An unexpected error occurred")

        if isinstance(result, AdmissionError):
            logger.warning(
                f"🚫 Reservation rejected ({result.kind.value}): {result.message} "
                f"[uid={identity.uid if identity else None}]"
            )
        return result

    def _admit(
        self,
        identity: Optional[CallerIdentity],
        payload: Any,
        context: RequestContext,
    ) -> AdmissionResult:
        # 1. Authentication & claims
        if identity is None:
            return AdmissionError(ErrorKind.UNAUTHENTICATED, "User must be authenticated")
        requested_tenant = payload.get("tenantId") if isinstance(payload, Mapping) else None
        if identity.tenant_id and identity.tenant_id != requested_tenant:
            return AdmissionError(
                ErrorKind.PERMISSION_DENIED, "User does not have access to this tenant"
            )

        # 2. Input shape
        request = parse_admission_request(payload)
        if isinstance(request, AdmissionError):
            return request

        # 3. Tenant and calendar
        tenant = self.store.get_tenant(request.tenant_id)
        calendar = self.store.get_calendar(request.calendar_id)
        if not tenant:
            return AdmissionError(ErrorKind.NOT_FOUND, "Tenant not found")
        if not calendar:
            return AdmissionError(ErrorKind.NOT_FOUND, "Calendar not found")
        if calendar.tenant_id != request.tenant_id:
            return AdmissionError(
                ErrorKind.PERMISSION_DENIED, "Calendar does not belong to the specified tenant"
            )

        # 4. Reservation type
        type_key = request.reservation_type_key or calendar.reservation_type_key
        if not type_key:
            return _invalid("Reservation type key is missing")
        raw_schema = tenant.reservation_types.get(type_key)
        if raw_schema is None:
            return _invalid("Invalid reservation type key")
        schema = ReservationTypeSchema.model_validate(raw_schema)

        # 5. Details
        validation = validate_details(request.details, schema)
        if not validation.is_valid:
            return _invalid(f"Validation errors: {', '.join(validation.errors)}")

        # 6 + 7. Replay, policy, conflict check and create under the calendar's slot guard
        capacity = calendar.max_concurrent_bookings if self.settings.enforce_capacity else 1
        status = "pending" if schema.requiresApproval else "confirmed"

        with self.store.slot_guard(request.calendar_id):
            if request.idempotency_key:
                existing = self.store.find_by_idempotency_key(
                    request.tenant_id, identity.uid, request.idempotency_key
                )
                if existing:
                    return self._replay(existing, request)

            if self.settings.enforce_booking_rules:
                violations = self._booking_rule_violations(tenant, calendar, request)
                if violations:
                    return AdmissionError(
                        ErrorKind.FAILED_PRECONDITION,
                        f"Booking rules violated: {', '.join(violations)}",
                    )

            if self.conflicts.has_conflict(
                request.tenant_id,
                request.calendar_id,
                request.start,
                request.end,
                capacity=capacity or 1,
            ):
                return AdmissionError(ErrorKind.FAILED_PRECONDITION, "Time slot not available")

            try:
                reservation = self.store.create_reservation(
                    tenant_id=request.tenant_id,
                    calendar_id=request.calendar_id,
                    reservation_type_key=type_key,
                    start=request.start,
                    end=request.end,
                    user_id=identity.uid,
                    details=request.details,
                    status=status,
                    request_metadata=context.as_metadata(),
                    idempotency_key=request.idempotency_key,
                )
            except DuplicateReservationError:
                # A concurrent request with the same key committed first
                existing = self.store.find_by_idempotency_key(
                    request.tenant_id, identity.uid, request.idempotency_key
                )
                if existing is None:
                    raise
                return self._replay(existing, request)
            reservation_id = reservation.id

        logger.info(
            f"✅ Reservation {reservation_id} created ({status}) on calendar "
            f"{request.calendar_id} for tenant {request.tenant_id}"
        )
        return AdmissionSuccess(reservation_id, status)

    def _replay(self, existing: Reservation, request: AdmissionRequest) -> AdmissionResult:
        """Answer a retry with the reservation its idempotency key already created"""
        if (
            existing.calendar_id != request.calendar_id
            or existing.start != request.start
            or existing.end != request.end
        ):
            return _invalid("idempotencyKey was already used for a different reservation")

        logger.info(f"♻️ Returning existing reservation {existing.id} for idempotency key")
        return AdmissionSuccess(existing.id, existing.status, replayed=True)

    def _booking_rule_violations(
        self, tenant: Tenant, calendar: Calendar, request: AdmissionRequest
    ) -> list[str]:
        if tenant.status != "active":
            return ["Tenant is not active"]

        settings = tenant.settings or {}
        return check_booking_rules(
            calendar,
            request.start,
            request.end,
            now=self.clock(),
            tz_name=settings.get("timeZone") or config.DEFAULT_TIMEZONE,
            max_advance_days=settings.get("maxAdvanceBooking"),
        )
