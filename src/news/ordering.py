"""Projection of the story table onto the ranked ID list."""

from typing import Mapping, Sequence

from src.integrations.hackernews import Story
from src.utils.errors import DataIntegrityError


def project_stories(
    ranked_ids: Sequence[int],
    stories: Mapping[int, Story],
    wanted: int,
) -> list[Story]:
    """Return the first ``wanted`` stories in ranked order.

    Args:
        ranked_ids: Ranked top story IDs
        stories: Loaded stories keyed by ID
        wanted: Number of stories to return

    Returns:
        ``[stories[ranked_ids[i]] for i in range(wanted)]``

    Raises:
        DataIntegrityError: If the ranked list is shorter than ``wanted`` or a
            ranked ID within the prefix has no loaded story
    """
    if len(ranked_ids) < wanted:
        raise DataIntegrityError(
            f"Ranked list has {len(ranked_ids)} ids, fewer than the {wanted} wanted",
            available=len(ranked_ids),
            wanted=wanted,
        )

    ordered = []
    for story_id in ranked_ids[:wanted]:
        story = stories.get(story_id)
        if story is None:
            raise DataIntegrityError(
                f"Story #{story_id} is ranked but was not loaded", story_id=story_id
            )
        ordered.append(story)
    return ordered
