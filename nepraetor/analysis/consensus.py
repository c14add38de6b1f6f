"""
Digit Consensus Module - Reconciles the reference readings of the three views.

OCR errors in different views rarely hit the same decimal place, so the
readings are voted on digit by digit instead of as whole numbers:
1368, 1368 and 1358 agree on every place except the tens, where 6 wins.
"""

from collections import Counter
from typing import Iterable, List


def build_consensus(readings: Iterable[int]) -> int:
    """
    Merge OCR readings into one trusted number by per-digit majority.

    Readings of 0 mean "nothing recognized" and are ignored. The others
    are left-padded with zeros to a common width and voted on from the
    least significant place upwards. Padding zeros only take part in a
    vote once a non-zero digit has been accepted below them. Ties go to
    the smaller digit.

    Args:
        readings: Non-negative readings, one per view

    Returns:
        Trusted reference number, 0 if no view was read

    Example:
        >>> build_consensus([1368, 1368, 1358])
        1368
        >>> build_consensus([0, 0, 0])
        0
    """
    valid = [int(r) for r in readings if r > 0]
    if not valid:
        return 0

    texts = [str(r) for r in valid]
    width = max(len(t) for t in texts)
    padded = [t.zfill(width) for t in texts]
    padding = [width - len(t) for t in texts]

    result: List[str] = []
    have_nonzero = False

    for pos in range(width - 1, -1, -1):
        digits = [
            text[pos]
            for text, pad in zip(padded, padding)
            if pos >= pad or have_nonzero
        ]
        if not digits:
            continue

        counts = Counter(digits)
        chosen = min(counts, key=lambda d: (-counts[d], d))
        result.insert(0, chosen)
        if chosen != "0":
            have_nonzero = True

    if not result:
        return 0
    return int("".join(result))
