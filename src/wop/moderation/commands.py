"""Moderation commands.

Admin requests arrive as loose JSON bodies. They are validated into one of
five frozen command types before anything is dispatched, so the processor
only ever sees well-formed commands carrying exactly the fields they need.
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar

from wop.errors import UnsupportedActionError, ValidationError
from wop.moderation.locator import LOCATABLE_TYPES, normalize_target_id, parse_uuid

USER_ACTIONS = ("ban", "unban", "reset_strikes", "adjust_points")


@dataclass(frozen=True)
class BanUser:
    user_id: uuid.UUID
    # None means "permanent": the processor substitutes the ban sentinel
    banned_until: datetime | None = None
    action: ClassVar[str] = "ban"


@dataclass(frozen=True)
class UnbanUser:
    user_id: uuid.UUID
    action: ClassVar[str] = "unban"


@dataclass(frozen=True)
class ResetStrikes:
    user_id: uuid.UUID
    action: ClassVar[str] = "reset_strikes"


@dataclass(frozen=True)
class AdjustPoints:
    user_id: uuid.UUID
    delta: int = 0
    action: ClassVar[str] = "adjust_points"


@dataclass(frozen=True)
class RemoveContent:
    report_id: int
    target_type: str
    target_id: str
    action: ClassVar[str] = "remove_content"


UserCommand = BanUser | UnbanUser | ResetStrikes | AdjustPoints
ModerationCommand = UserCommand | RemoveContent


def _coerce_delta(value: Any) -> int:  # noqa: ANN401
    """Points delta; anything absent or non-numeric counts as 0, huge values are rejected."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    delta = int(number)
    # points is a 32-bit INTEGER column
    if not -(2**31) <= delta < 2**31:
        msg = "deltaPoints is out of range"
        raise ValidationError(msg)
    return delta


def _parse_timestamp(value: Any) -> datetime | None:  # noqa: ANN401
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            msg = "bannedUntil must be an ISO 8601 timestamp"
            raise ValidationError(msg) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_user_action(payload: Mapping[str, Any]) -> UserCommand:
    """Validate an ``/admin/users/actions`` body into a command.

    Raises:
        ValidationError: ``action`` or ``userId`` missing, or a field is malformed.
        UnsupportedActionError: ``action`` is not one of the user actions.
    """
    missing = [name for name in ("action", "userId") if not payload.get(name)]
    if missing:
        raise ValidationError.missing(missing)

    action = payload["action"]
    if action not in USER_ACTIONS:
        msg = f"Unsupported action: {action}"
        raise UnsupportedActionError(msg)

    user_id = parse_uuid(payload["userId"], "userId")
    if action == "ban":
        return BanUser(user_id=user_id, banned_until=_parse_timestamp(payload.get("bannedUntil")))
    if action == "unban":
        return UnbanUser(user_id=user_id)
    if action == "reset_strikes":
        return ResetStrikes(user_id=user_id)
    return AdjustPoints(user_id=user_id, delta=_coerce_delta(payload.get("deltaPoints")))


def parse_remove_content(payload: Mapping[str, Any]) -> RemoveContent:
    """Validate a ``/reports/remove`` body."""
    missing = [name for name in ("reportId", "targetId", "targetType") if not payload.get(name)]
    if missing:
        raise ValidationError.missing(missing)

    target_type = payload["targetType"]
    if target_type not in LOCATABLE_TYPES:
        msg = f"Unsupported target type: {target_type}"
        raise ValidationError(msg)

    try:
        report_id = int(payload["reportId"])
    except (TypeError, ValueError):
        msg = "reportId must be an integer"
        raise ValidationError(msg) from None

    return RemoveContent(
        report_id=report_id,
        target_type=target_type,
        target_id=normalize_target_id(target_type, payload["targetId"]),
    )
