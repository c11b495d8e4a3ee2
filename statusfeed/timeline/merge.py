"""
Duplicate removal and time-ordered merging of feeds.

A feed is a list of Status sorted newest first with unique ids. Both
functions here are pure: they never mutate their inputs and always
return new lists.
"""

from collections.abc import Sequence

from statusfeed.timeline.schemas import Status


def remove_duplicates(a: Sequence[Status], b: Sequence[Status]) -> list[Status]:
    """
    Drop every status from a whose id also appears in b.

    Surviving statuses keep their relative order.

    Args:
        a: Feed to filter
        b: Feed whose ids are excluded

    Returns:
        New list of the statuses of a not present in b
    """
    seen = {status.id for status in b}
    return [status for status in a if status.id not in seen]


def merge(a: Sequence[Status], b: Sequence[Status]) -> list[Status]:
    """
    Merge two newest-first feeds into one newest-first feed.

    Precondition: both inputs are sorted descending by posted_at and share
    no ids (run remove_duplicates(a, b) first). Inputs are never re-sorted;
    unsorted input gives an unsorted result.

    On equal timestamps the status from a is taken first.

    Raises:
        MalformedTimestamp: If a compared status has an unparsable created_at
    """
    merged: list[Status] = []
    i, j = 0, 0

    while i < len(a) and j < len(b):
        if b[j].posted_at > a[i].posted_at:
            merged.append(b[j])
            j += 1
        else:
            merged.append(a[i])
            i += 1

    merged.extend(a[i:])
    merged.extend(b[j:])
    return merged


def merge_into(
    accumulator: Sequence[Status],
    candidate: Sequence[Status],
) -> tuple[list[Status], int]:
    """
    Fold a freshly fetched feed into the accumulated feed.

    Entries of the accumulator that the candidate also contains are
    replaced by the candidate's copy.

    Returns:
        Tuple of (merged feed, number of duplicates dropped)
    """
    deduped = remove_duplicates(accumulator, candidate)
    return merge(deduped, candidate), len(accumulator) - len(deduped)
