"""
Journey service - career history timeline.
The owner edits the whole list and saves it in one go.
"""

import logging
import time
from datetime import date
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from core.domain.constants import TEMP_ID_PREFIX
from core.domain.models import JourneyEntry
from core.interfaces.repositories import IJourneyRepository
from core.state.session import ClientSession
from core.utils.dates import format_duration, years_text

logger = logging.getLogger(__name__)


def is_temporary(entry_id: str) -> bool:
    return entry_id.startswith(TEMP_ID_PREFIX)


def order_timeline(entries: List[JourneyEntry]) -> List[JourneyEntry]:
    """Newest start first; undated entries last; ties by display_order, highest first."""
    return sorted(
        entries,
        key=lambda e: (e.start_date is not None, e.start_date or date.min, e.display_order),
        reverse=True,
    )


def entry_duration(entry: JourneyEntry, today: Optional[date] = None) -> Optional[str]:
    return format_duration(entry.start_date, entry.end_date, today)


class JourneyService:

    def __init__(self, journey_repo: IJourneyRepository):
        self.journey_repo = journey_repo

    async def get_timeline(self, user_id: UUID) -> List[JourneyEntry]:
        return order_timeline(await self.journey_repo.list_for_user(user_id))

    def new_entry(self, user_id: UUID, existing_count: int) -> JourneyEntry:
        return JourneyEntry(
            id=f"{TEMP_ID_PREFIX}{int(time.time() * 1000)}",
            user_id=user_id,
            display_order=existing_count,
        )

    def validate(self, entries: List[JourneyEntry]) -> Dict[str, str]:
        """Errors keyed '<index>-<field>'."""
        errors = {}
        for index, entry in enumerate(entries):
            if not entry.club_name.strip():
                errors[f"{index}-club_name"] = "Title is required"
            if not entry.position_role.strip():
                errors[f"{index}-position_role"] = "Role is required"
            if not entry.division_league.strip():
                errors[f"{index}-division_league"] = "Competition is required"
            if not entry.start_date:
                errors[f"{index}-start_date"] = "Start month and year are required"
        return errors

    def _row(self, user_id: UUID, entry: JourneyEntry, display_order: int) -> dict:
        return {
            "user_id": str(user_id),
            "club_name": entry.club_name,
            "position_role": entry.position_role,
            "division_league": entry.division_league,
            "years": years_text(entry.start_date, entry.end_date) or entry.years,
            "highlights": [h for h in entry.highlights if h.strip()],
            "entry_type": entry.entry_type.value,
            "location_city": entry.location_city,
            "location_country": entry.location_country,
            "start_date": entry.start_date.isoformat() if entry.start_date else None,
            "end_date": entry.end_date.isoformat() if entry.end_date else None,
            "description": entry.description,
            "badge_label": entry.badge_label,
            "image_url": entry.image_url,
            "world_club_id": str(entry.world_club_id) if entry.world_club_id else None,
            "display_order": display_order,
        }

    async def save(self, session: ClientSession, entries: List[JourneyEntry]) -> Tuple[bool, Dict[str, str]]:
        """
        Persist the edited list (in on-screen order): delete removed rows,
        insert temp- entries and update the rest.
        """
        user_id = session.user_id
        if user_id is None:
            return False, {"form": "Please sign in to continue."}

        errors = self.validate(entries)
        if errors:
            return False, errors

        try:
            persisted = await self.journey_repo.list_for_user(user_id)
            kept = {e.id for e in entries}
            deleted = [e.id for e in persisted if e.id not in kept and not is_temporary(e.id)]
            await self.journey_repo.delete_many(deleted)

            for index, entry in enumerate(entries):
                row = self._row(user_id, entry, len(entries) - index)
                if is_temporary(entry.id):
                    await self.journey_repo.insert(row)
                else:
                    await self.journey_repo.update(entry.id, row)
        except Exception as e:
            logger.error(f"[JOURNEY] Error saving journey entries for {user_id}: {e}")
            session.toasts.error("Failed to save journey. Please try again.")
            return False, {}

        logger.info(f"[JOURNEY] Saved {len(entries)} entries for {user_id} ({len(deleted)} deleted)")
        session.toasts.success("Journey updated successfully.")
        return True, {}
