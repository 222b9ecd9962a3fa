"""pipeline.comparison.ranking

Score and rank validated backends.

score = 5 if the document is valid, plus 0.5 per passed check, capped at 10.
Scores are kept unrounded so half points still separate backends.

Winner: the unique highest score; ``tie`` when several share it;
``inconclusive`` when fewer than two backends have a result.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from .model import WINNER_INCONCLUSIVE, WINNER_TIE, Ranking, ValidationResult

VALID_POINTS = 5.0
CHECK_POINTS = 0.5
MAX_SCORE = 10.0


def score(result: Optional[ValidationResult]) -> float:
    if result is None:
        return 0.0
    s = (VALID_POINTS if result.valid else 0.0) + CHECK_POINTS * result.passed_checks
    return min(MAX_SCORE, s)


def rank(validations: Mapping[str, Optional[ValidationResult]]) -> Ranking:
    present = {k: v for k, v in validations.items() if v is not None}
    scores: Dict[str, float] = {k: score(v) for k, v in present.items()}
    # Highest first; registry order breaks ties so the order is stable.
    order = tuple(sorted(scores, key=lambda k: -scores[k]))

    # Nothing to rank against: a lone survivor is reported, not crowned.
    if len(scores) < 2:
        winner = WINNER_INCONCLUSIVE
    else:
        best = max(scores.values())
        top = [k for k, s in scores.items() if s == best]
        winner = top[0] if len(top) == 1 else WINNER_TIE
    return Ranking(scores=scores, order=order, winner=winner)
