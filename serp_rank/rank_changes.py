"""Turn consecutive ranking checks into owner notifications."""

from __future__ import annotations

from typing import Optional

from serp_rank.config import RESULTS_DEPTH
from serp_rank.models import RankChange, TrackedKeyword

POSITION_IMPROVED = "position_improved"
POSITION_DECLINED = "position_declined"
POSITION_FOUND = "position_found"
POSITION_LOST = "position_lost"


def classify_rank_change(
    keyword: TrackedKeyword,
    previous: Optional[int],
    current: Optional[int],
) -> Optional[RankChange]:
    """Describe the move from *previous* to *current*, or None if nothing changed."""
    if previous is not None and current is not None:
        if current == previous:
            return None
        if current < previous:
            kind, title, verb = POSITION_IMPROVED, "Ranking improved", "improved"
        else:
            kind, title, verb = POSITION_DECLINED, "Ranking declined", "declined"
        message = f'Keyword "{keyword.keyword}" {verb} from position {previous} to {current}'
    elif previous is None and current is not None:
        kind, title = POSITION_FOUND, "Website found"
        message = f'Keyword "{keyword.keyword}" appeared in search results at position {current}'
    elif previous is not None and current is None:
        kind, title = POSITION_LOST, "Ranking lost"
        message = (
            f'Keyword "{keyword.keyword}" no longer appears in the top '
            f"{RESULTS_DEPTH} search results"
        )
    else:
        return None

    return RankChange(
        keyword_id=keyword.id,
        user_id=keyword.user_id,
        kind=kind,
        title=title,
        message=message,
        old_position=previous,
        new_position=current,
    )
