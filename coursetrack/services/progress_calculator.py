"""Course completion math.

Pure functions over counts, so they can be tested and reused without
touching storage.  A course with no lessons reports 0% and is never
complete through this path; only a forced completion can finish it.
"""

from __future__ import annotations


def percentage(total_lessons: int, done_lessons: int) -> int:
    """Whole-number completion percentage, floored, in [0, 100]."""
    if total_lessons <= 0:
        return 0
    done = max(0, min(done_lessons, total_lessons))
    return done * 100 // total_lessons


def is_complete(total_lessons: int, done_lessons: int) -> bool:
    return total_lessons > 0 and done_lessons >= total_lessons
