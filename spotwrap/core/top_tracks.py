"""Current user's top tracks; the last request wins."""
import logging
from typing import List

from spotwrap.config import TOP_TRACKS_LIMIT
from spotwrap.core.errors import RequestFailed, SpotwrapError
from spotwrap.models.track import TimeRange, Track

logger = logging.getLogger(__name__)

TOP_TRACKS_ALERT_TITLE = "Couldn't Retrieve Top Tracks"


class TopTracksLoader:
    """Holds the displayed top-tracks list.

    Each load() takes a generation number; a response (or failure) arriving
    after a newer load() started is dropped, so an older response can never
    overwrite a newer one.
    """

    def __init__(self, api) -> None:
        self._api = api
        self._generation = 0
        self.tracks: List[Track] = []
        self.time_range = TimeRange.SHORT_TERM
        self.is_loading = False
        self.could_not_load = False

    async def load(
        self,
        time_range: TimeRange = TimeRange.SHORT_TERM,
        offset: int = 0,
        limit: int = TOP_TRACKS_LIMIT,
    ) -> List[Track]:
        self._generation += 1
        generation = self._generation
        self.time_range = TimeRange(time_range)
        self.is_loading = True
        try:
            tracks = await self._api.current_user_top_tracks(self.time_range, offset, limit)
        except SpotwrapError as e:
            if generation != self._generation:
                logger.debug("Ignoring failure of superseded top-tracks request: %s", e)
                return self.tracks
            self.could_not_load = True
            logger.warning("Error retrieving top tracks: %s", e)
            raise RequestFailed(e.message, title=TOP_TRACKS_ALERT_TITLE) from e
        finally:
            # Also runs on cancellation; a newer load owns the flag otherwise
            if generation == self._generation:
                self.is_loading = False

        if generation != self._generation:
            logger.debug("Dropped stale top-tracks response (generation %d)", generation)
            return self.tracks
        self.tracks = [t for t in tracks if t.id is not None]
        self.could_not_load = False
        return self.tracks

    def to_dict(self) -> dict:
        return {
            "time_range": self.time_range.value,
            "is_loading": self.is_loading,
            "could_not_load": self.could_not_load,
            "tracks": [t.to_dict() for t in self.tracks],
        }
