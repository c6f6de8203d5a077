from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional, Sequence


Op = Literal["match", "sub", "ins", "del"]

SubCost = Callable[[str, str], float]


@dataclass(frozen=True)
class EditOp:
    op: Op
    expected: Optional[str] = None
    predicted: Optional[str] = None
    cost: float = 0.0


def unit_cost(expected: str, predicted: str) -> float:
    return 0.0 if expected == predicted else 1.0


def _table(
    expected: Sequence[str], predicted: Sequence[str], sub_cost: SubCost
) -> tuple[list[list[float]], list[list[Op]]]:
    n = len(expected)
    m = len(predicted)

    dp = [[0.0] * (m + 1) for _ in range(n + 1)]
    back: list[list[Op]] = [["match"] * (m + 1) for _ in range(n + 1)]

    for i in range(1, n + 1):
        dp[i][0] = float(i)
        back[i][0] = "del"
    for j in range(1, m + 1):
        dp[0][j] = float(j)
        back[0][j] = "ins"

    for i in range(1, n + 1):
        for j in range(1, m + 1):
            e = expected[i - 1]
            p = predicted[j - 1]
            cost_sub = 0.0 if e == p else sub_cost(e, p)
            sub = dp[i - 1][j - 1] + cost_sub
            dele = dp[i - 1][j] + 1.0
            ins = dp[i][j - 1] + 1.0
            best = min(sub, dele, ins)
            dp[i][j] = best
            if best == sub:
                back[i][j] = "match" if cost_sub == 0.0 else "sub"
            elif best == dele:
                back[i][j] = "del"
            else:
                back[i][j] = "ins"
    return dp, back


def weighted_distance(
    expected: Sequence[str], predicted: Sequence[str], sub_cost: SubCost = unit_cost
) -> float:
    dp, _ = _table(expected, predicted, sub_cost)
    return dp[len(expected)][len(predicted)]


def weighted_levenshtein_ops(
    expected: Sequence[str], predicted: Sequence[str], sub_cost: SubCost = unit_cost
) -> list[EditOp]:
    """
    Weighted Levenshtein DP that returns a stable edit script (prefers
    match/sub over indels on ties). Insertions and deletions cost 1.0;
    substitutions cost whatever `sub_cost` says.
    """
    _, back = _table(expected, predicted, sub_cost)

    ops: list[EditOp] = []
    i, j = len(expected), len(predicted)
    while i > 0 or j > 0:
        step = back[i][j]
        if step in {"match", "sub"}:
            e = expected[i - 1]
            p = predicted[j - 1]
            cost = 0.0 if step == "match" else sub_cost(e, p)
            ops.append(EditOp(step, expected=e, predicted=p, cost=cost))  # type: ignore[arg-type]
            i -= 1
            j -= 1
        elif step == "del":
            ops.append(EditOp("del", expected=expected[i - 1], predicted=None, cost=1.0))
            i -= 1
        else:
            ops.append(EditOp("ins", expected=None, predicted=predicted[j - 1], cost=1.0))
            j -= 1

    ops.reverse()
    return ops

