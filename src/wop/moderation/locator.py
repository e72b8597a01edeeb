"""Content locator: maps (target_type, target_id) to the owning user."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from wop.db.models import CONTENT_MODELS, TARGET_TYPES
from wop.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Target kinds whose owner can be resolved (chat messages are report-only)
LOCATABLE_TYPES = ("post", "comment", "grid", "profile")

TargetRef = tuple[str, str]


def parse_uuid(value: object, field: str) -> uuid.UUID:
    """Parse a UUID from request input, raising ValidationError naming the field."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        msg = f"{field} must be a valid id"
        raise ValidationError(msg) from None


def normalize_target_id(target_type: str, target_id: object) -> str:
    """Canonical text form of a target id as stored in reports.target_id."""
    if target_type not in TARGET_TYPES:
        msg = f"Unsupported target type: {target_type}"
        raise ValidationError(msg)
    if target_type == "chat_message":
        try:
            return str(int(str(target_id)))
        except ValueError:
            msg = "targetId must be a numeric message id"
            raise ValidationError(msg) from None
    return str(parse_uuid(target_id, "targetId"))


def _content_model(target_type: str):  # noqa: ANN202
    model = CONTENT_MODELS.get(target_type)
    if model is None:
        msg = f"Unsupported target type: {target_type}"
        raise ValidationError(msg)
    return model


async def resolve_owner(db: AsyncSession, target_type: str, target_id: str) -> uuid.UUID:
    """Return the user that owns the target.

    Profiles own themselves. For posts, comments and grids the row's user_id
    is returned; NotFoundError if the row is gone.
    """
    if target_type == "profile":
        return parse_uuid(target_id, "targetId")

    model = _content_model(target_type)
    content_id = parse_uuid(target_id, "targetId")
    result = await db.execute(select(model.user_id).where(model.id == content_id))
    owner = result.scalar_one_or_none()
    if owner is None:
        msg = f"{target_type.capitalize()} not found"
        raise NotFoundError(msg)
    return owner


async def resolve_owners(db: AsyncSession, refs: Iterable[TargetRef]) -> dict[TargetRef, uuid.UUID]:
    """Resolve many targets with at most one query per content type.

    Targets that no longer exist (or cannot be located) are left out of the
    returned mapping.
    """
    by_type: dict[str, dict[uuid.UUID, list[TargetRef]]] = defaultdict(dict)
    owners: dict[TargetRef, uuid.UUID] = {}

    for ref in refs:
        target_type, target_id = ref
        if target_type not in LOCATABLE_TYPES:
            continue
        try:
            parsed = uuid.UUID(str(target_id))
        except ValueError:
            logger.debug("Skipping malformed target id %s/%s", target_type, target_id)
            continue
        if target_type == "profile":
            owners[ref] = parsed
        else:
            by_type[target_type].setdefault(parsed, []).append(ref)

    for target_type, wanted in by_type.items():
        model = CONTENT_MODELS[target_type]
        result = await db.execute(
            select(model.id, model.user_id).where(model.id.in_(list(wanted)))
        )
        for content_id, owner_id in result.all():
            for ref in wanted.get(content_id, []):
                owners[ref] = owner_id

    return owners


async def owned_content_ids(db: AsyncSession, user_id: uuid.UUID) -> dict[str, list[str]]:
    """Return ids (report target_id form) of every post, comment and grid the user owns."""
    owned: dict[str, list[str]] = {}
    for target_type, model in CONTENT_MODELS.items():
        result = await db.execute(select(model.id).where(model.user_id == user_id))
        owned[target_type] = [str(content_id) for content_id in result.scalars()]
    return owned


async def delete_content(db: AsyncSession, target_type: str, target_id: str) -> bool:
    """Delete a post, comment or grid. Profiles are never deleted here.

    Returns True if a row was removed.
    """
    if target_type == "profile":
        return False
    model = _content_model(target_type)
    result = await db.execute(
        delete(model)
        .where(model.id == parse_uuid(target_id, "targetId"))
        .execution_options(synchronize_session=False)
    )
    deleted = result.rowcount > 0
    logger.info("Deleted %s %s (found=%s)", target_type, target_id, deleted)
    return deleted
