"""Client-held view tokens for once-per-day view accounting.

A view token is a signed JWT carried in a cookie. It records which entity ids
a visitor has already been credited with during the current day window, a
random visitor id, and the instant the window closes (the next midnight in the
configured zone). The server never stores the token; a missing, tampered or
expired token simply decodes to an empty one.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, tzinfo

from jose import JWTError, jwt

from novelhub.db.time import as_utc

logger = logging.getLogger(__name__)

ID_SEPARATOR = ","
VISITOR_ID_BYTES = 12


def next_midnight(now: datetime, zone: tzinfo) -> datetime:
    """Return the first midnight in ``zone`` strictly after ``now``, in UTC."""
    local = as_utc(now).astimezone(zone)
    midnight = datetime.combine(local.date() + timedelta(days=1), time(0), tzinfo=zone)
    return midnight.astimezone(as_utc(now).tzinfo)


def seconds_until(expires_at: datetime, now: datetime) -> int:
    """Whole seconds from ``now`` to ``expires_at``, never less than one."""
    return max(1, int((as_utc(expires_at) - as_utc(now)).total_seconds()))


def _parse_ids(raw: str) -> frozenset[int]:
    ids = set()
    for part in raw.split(ID_SEPARATOR):
        part = part.strip()
        if not part:
            continue
        value = int(part)
        if value > 0:
            ids.add(value)
    return frozenset(ids)


@dataclass(frozen=True)
class ViewToken:
    """Decoded view token for one accounting scope."""

    scope: str
    visitor_id: str = field(default_factory=lambda: secrets.token_urlsafe(VISITOR_ID_BYTES))
    entity_ids: frozenset[int] = frozenset()
    expires_at: datetime | None = None

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self.entity_ids

    def credit(self, entity_id: int, now: datetime, zone: tzinfo) -> ViewToken:
        """Return a token that also holds ``entity_id``, expiring at the next midnight."""
        return ViewToken(
            scope=self.scope,
            visitor_id=self.visitor_id,
            entity_ids=self.entity_ids | {entity_id},
            expires_at=next_midnight(now, zone),
        )

    def encode(self, secret: str, algorithm: str) -> str:
        """Serialize the token into its signed cookie form."""
        if self.expires_at is None:
            raise ValueError("Cannot encode a view token without an expiry")
        claims = {
            "scope": self.scope,
            "vid": self.visitor_id,
            "ids": ID_SEPARATOR.join(str(i) for i in sorted(self.entity_ids)),
            "exp": int(as_utc(self.expires_at).timestamp()),
        }
        return jwt.encode(claims, secret, algorithm=algorithm)

    @classmethod
    def decode(
        cls,
        raw: str | None,
        *,
        scope: str,
        secret: str,
        algorithm: str,
        now: datetime,
    ) -> ViewToken:
        """Parse a cookie value, treating anything unusable as an empty token."""
        if not raw:
            return cls(scope=scope)
        try:
            # Expiry is checked against the caller's clock below, not the host's.
            claims = jwt.decode(
                raw, secret, algorithms=[algorithm], options={"verify_exp": False}
            )
        except JWTError:
            logger.debug("Discarding unreadable %s view token", scope)
            return cls(scope=scope)

        try:
            token_scope = claims["scope"]
            visitor_id = str(claims["vid"])
            entity_ids = _parse_ids(str(claims.get("ids", "")))
            expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=as_utc(now).tzinfo)
        except (KeyError, TypeError, ValueError):
            logger.debug("Discarding malformed %s view token", scope)
            return cls(scope=scope)

        if token_scope != scope:
            return cls(scope=scope)
        if expires_at <= as_utc(now):
            # Window rolled over: start a fresh visitor window.
            return cls(scope=scope)
        return cls(
            scope=scope,
            visitor_id=visitor_id,
            entity_ids=entity_ids,
            expires_at=expires_at,
        )
