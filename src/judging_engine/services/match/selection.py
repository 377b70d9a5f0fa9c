"""Team eligibility and random selection for the next judge visit."""

from __future__ import annotations

import random
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class Candidate:
    """A team that could be shown to a judge.

    Attributes:
        team_id: Team identifier.
        judged_count: Non-skipped assignments the team has received in the event.
    """

    team_id: str
    judged_count: int = 0


def eligible_candidates(
    team_ids: Iterable[str],
    already_judged: Collection[str],
    judged_counts: Mapping[str, int],
    min_judges_per_project: int,
    exclude: Collection[str] = (),
) -> list[Candidate]:
    """Filter teams down to the ones a judge may be sent to next.

    1. Teams the judge has already judged (or must never judge) are dropped.
    2. Teams already at the per-project target are dropped while any team is
       still below it. Once every remaining team has met the target, only the
       least-judged ones are kept so coverage stays balanced.

    Args:
        team_ids: Approved teams that can be judged at all.
        already_judged: Teams this judge has completed or is visiting.
        judged_counts: Team id to judged count across all judges.
        min_judges_per_project: Target number of judges per team.
        exclude: Extra teams to drop, such as a participant judge's own team.

    Returns:
        Candidates sorted by team id, empty when nothing is eligible.
    """
    remaining = [
        Candidate(team_id=tid, judged_count=judged_counts.get(tid, 0))
        for tid in sorted(set(team_ids))
        if tid not in already_judged and tid not in exclude
    ]
    if not remaining:
        return []

    below_target = [c for c in remaining if c.judged_count < min_judges_per_project]
    if below_target:
        return below_target

    fewest = min(c.judged_count for c in remaining)
    return [c for c in remaining if c.judged_count == fewest]


def select_candidate(candidates: list[Candidate], rng: random.Random) -> Candidate | None:
    """Pick one candidate uniformly at random.

    Args:
        candidates: Eligible candidates.
        rng: Random source, injected so callers can make selection reproducible.

    Returns:
        The chosen candidate, or None if there are none.
    """
    if not candidates:
        return None
    return rng.choice(candidates)
