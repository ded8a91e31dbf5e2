"""Once-per-day view accounting for novels and chapters.

Each view request carries the visitor's view token for the relevant scope.
An entity already listed in an unexpired token is not counted again. New
credits are written to a server-side ledger under a unique constraint before
the counter is bumped, so requests that race with the same token still add
at most one view per window.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, tzinfo

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from novelhub.core.settings import settings
from novelhub.db.time import as_utc, utcnow
from novelhub.models import Novel
from novelhub.repositories.content_store import ContentStore
from novelhub.services.view_token import ViewToken, seconds_until

logger = logging.getLogger(__name__)


class ViewScope(str, enum.Enum):
    """Accounting namespace; each has its own cookie and counter target."""

    NOVEL = "novel"
    CHAPTER = "chapter"

    @property
    def cookie_name(self) -> str:
        return f"viewed_{self.value}s_today"


class ViewOutcome(enum.Enum):
    CREDITED = "credited"
    ALREADY_CREDITED = "already_credited"


@dataclass(frozen=True)
class ViewResult:
    """Outcome of one view request plus the token the caller should persist.

    ``token`` is None when the caller's current token should be left as is.
    """

    outcome: ViewOutcome
    token: ViewToken | None = None
    cookie_value: str | None = None
    max_age: int | None = None

    @property
    def counted(self) -> bool:
        return self.outcome is ViewOutcome.CREDITED


_NOT_COUNTED = ViewResult(ViewOutcome.ALREADY_CREDITED)


class ViewAccountingService:
    """Deduplicate view-count increments per visitor, entity and day."""

    def __init__(
        self,
        store: ContentStore,
        *,
        secret: str | None = None,
        algorithm: str | None = None,
        zone: tzinfo | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.secret = secret or settings.secret_key
        self.algorithm = algorithm or settings.jwt_algorithm
        self.zone = zone or settings.view_window_zone
        self.clock = clock

    def read_token(self, scope: ViewScope, raw_token: str | None, now: datetime) -> ViewToken:
        return ViewToken.decode(
            raw_token,
            scope=scope.value,
            secret=self.secret,
            algorithm=self.algorithm,
            now=now,
        )

    def record_view(
        self,
        scope: ViewScope,
        entity_id: int,
        raw_token: str | None = None,
        now: datetime | None = None,
    ) -> ViewResult:
        """Credit one view of ``entity_id`` unless this visitor already has today.

        Store failures and unknown ids are logged and reported as not counted;
        they never propagate to the caller.
        """
        now = as_utc(now or self.clock())
        token = self.read_token(scope, raw_token, now)
        if entity_id in token:
            return _NOT_COUNTED

        updated = token.credit(entity_id, now, self.zone)
        try:
            credited = self._credit(scope, entity_id, updated)
            self.store.commit()
        except SQLAlchemyError:
            logger.exception("Failed to record %s view for id=%s", scope.value, entity_id)
            return _NOT_COUNTED
        if credited is None:
            logger.info("Ignoring view for unknown or unpublished %s id=%s", scope.value, entity_id)
            return _NOT_COUNTED

        outcome = ViewOutcome.CREDITED if credited else ViewOutcome.ALREADY_CREDITED
        return ViewResult(
            outcome=outcome,
            token=updated,
            cookie_value=updated.encode(self.secret, self.algorithm),
            max_age=seconds_until(updated.expires_at, now),  # type: ignore[arg-type]
        )

    def _credit(self, scope: ViewScope, entity_id: int, token: ViewToken) -> bool | None:
        """Write the ledger row and bump counters in one savepoint.

        Returns True when counted, False when a racing request already counted
        this window, and None when the entity does not exist.
        """
        try:
            with self.store.savepoint():
                self.store.insert_view_credit(
                    visitor_id=token.visitor_id,
                    scope=scope.value,
                    entity_id=entity_id,
                    window_end=token.expires_at,  # type: ignore[arg-type]
                )
                if scope is ViewScope.CHAPTER:
                    found = self.store.increment_chapter_views(entity_id)
                else:
                    found = self.store.increment(Novel, entity_id)
                if not found:
                    raise _EntityMissing
        except IntegrityError:
            return False
        except _EntityMissing:
            return None
        return True

    def purge_expired_credits(self, now: datetime | None = None) -> int:
        """Remove ledger rows for windows that have already closed."""
        now = as_utc(now or self.clock())
        removed = self.store.purge_view_credits(now)
        self.store.commit()
        if removed:
            logger.info("Purged %d expired view credits", removed)
        return removed


class _EntityMissing(Exception):
    """Unwinds the credit savepoint when the counted row does not exist."""
