"""Selection of previously seen words to review in the next session."""

import logging

from .config import RECOMMENDER_BATCH_SIZE
from .errors import GeneratorUnavailable
from .interfaces import Recommender
from .mastery import MasteryStore
from .models import MasteryRecord

logger = logging.getLogger(__name__)


def unranked_selection(records: list[MasteryRecord], limit: int = RECOMMENDER_BATCH_SIZE) -> list[MasteryRecord]:
    """Deterministic selection used when the recommender is unavailable.

    Least recently reviewed first, lower mastery breaking ties, then id.
    """
    ordered = sorted(records, key=lambda r: (r.last_reviewed, r.mastery_level, r.id))
    return ordered[:limit]


class ReviewSelector:
    """Picks the mastery records that should be reviewed now."""

    def __init__(self, mastery_store: MasteryStore, recommender: Recommender,
                 fallback_on_unavailable: bool = True):
        self.mastery_store = mastery_store
        self.recommender = recommender
        self.fallback_on_unavailable = fallback_on_unavailable

    def select(self, category: str, topic: str) -> list[MasteryRecord]:
        """Return review records for a category/topic, highest priority first.

        Up to RECOMMENDER_BATCH_SIZE candidates are returned as stored. Larger
        candidate sets are ranked by the recommender; its order is kept.
        If the recommender fails, either fall back to unranked_selection or
        re-raise GeneratorUnavailable, depending on fallback_on_unavailable.
        """
        candidates = self.mastery_store.list(category, topic)
        if not candidates:
            return []
        if len(candidates) <= RECOMMENDER_BATCH_SIZE:
            return candidates

        try:
            ranked_ids = self._rank(candidates)
        except GeneratorUnavailable as e:
            if not self.fallback_on_unavailable:
                raise
            logger.warning(f"Recommender unavailable for {category}/{topic}, using unranked selection: {e}")
            return unranked_selection(candidates)

        by_id = {r.id: r for r in candidates}
        selected = []
        seen = set()
        for record_id in ranked_ids:
            if record_id in by_id and record_id not in seen:
                seen.add(record_id)
                selected.append(by_id[record_id])
        logger.info(f"Recommender picked {len(selected)} of {len(candidates)} candidates for {category}/{topic}")
        return selected

    def _rank(self, candidates: list[MasteryRecord]) -> list[str]:
        """Call the recommender, reporting any failure as GeneratorUnavailable."""
        try:
            return self.recommender.rank([r.to_candidate() for r in candidates])
        except GeneratorUnavailable:
            raise
        except Exception as e:
            logger.error(f"Recommender failed: {e}")
            raise GeneratorUnavailable(f"Recommender failed: {e}") from e
