"""Planning for best-effort bulk association changes."""

from collections.abc import Iterable

from contact_ledger.domain.models.relationships import (
    ALREADY_ASSOCIATED,
    DUPLICATE_IN_REQUEST,
    NOT_ASSOCIATED,
    BatchResult,
)


def plan_batch(
    target_ids: Iterable[str],
    known_ids: set[str],
    linked_ids: set[str],
    missing_reason: str,
    adding: bool,
) -> tuple[list[str], BatchResult]:
    """Split bulk targets into the pairs to change and the ones to skip.

    Args:
        target_ids: Requested target IDs, in request order
        known_ids: Targets that exist
        linked_ids: Targets already associated with the anchor
        missing_reason: Skip reason for targets that do not exist
        adding: True to plan inserts, False to plan deletes

    Returns:
        Tuple of (target IDs to act on, result holding the skips so far)
    """
    result = BatchResult()
    actionable: list[str] = []
    seen: set[str] = set()

    for target_id in target_ids:
        if target_id in seen:
            result.skip(target_id, DUPLICATE_IN_REQUEST)
            continue
        seen.add(target_id)

        if target_id not in known_ids:
            result.skip(target_id, missing_reason)
        elif adding and target_id in linked_ids:
            result.skip(target_id, ALREADY_ASSOCIATED)
        elif not adding and target_id not in linked_ids:
            result.skip(target_id, NOT_ASSOCIATED)
        else:
            actionable.append(target_id)

    return actionable, result
