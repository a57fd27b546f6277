"""
ESG Scorecard

Read-only view over persisted ESGScore rows: the latest (or requested)
period with grade and risk bands, change against the previous period, and a
trend over the most recent periods.
"""

from esg_readiness import store
from esg_readiness.scoring import risk_level, score_grade

TREND_PERIODS = 6
HISTORY_LIMIT = 12

_SCORE_FIELDS = (
    ("environmental", "environmental_score"),
    ("social", "social_score"),
    ("governance", "governance_score"),
    ("overall", "overall_score"),
)


def _scores_of(row):
    return {name: getattr(row, attr) for name, attr in _SCORE_FIELDS}


def _deltas(current, previous):
    if previous is None:
        return None
    return {name: round(current[name] - previous[name], 1) for name, _ in _SCORE_FIELDS}


def build_trends(rows):
    """Oldest-first trend points with change against the point before."""
    points = []
    previous = None
    for row in reversed(rows[:TREND_PERIODS]):
        scores = _scores_of(row)
        points.append({
            "period": row.period,
            **scores,
            "change": _deltas(scores, previous),
        })
        previous = scores
    return points


def build_scorecard(company_id, period=None):
    """
    Scorecard for a company.

    period selects which persisted period to show; defaults to the newest.
    Returns dict with scorecard (None when nothing is calculated yet),
    trends, periods (newest first) and, when empty, a message.
    """
    rows = store.list_scores(company_id, limit=HISTORY_LIMIT)
    if not rows:
        return {
            "scorecard": None,
            "trends": [],
            "periods": [],
            "message": "No ESG scores calculated yet",
        }

    periods = sorted({r.period for r in rows}, reverse=True)

    index = 0
    if period is not None:
        matches = [i for i, r in enumerate(rows) if r.period == period]
        if not matches:
            return {
                "scorecard": None,
                "trends": build_trends(rows),
                "periods": periods,
                "message": f"No ESG score calculated for {period}",
            }
        index = matches[0]

    latest = rows[index]
    previous_row = rows[index + 1] if index + 1 < len(rows) else None
    scores = _scores_of(latest)

    pillars = {}
    for name, _ in _SCORE_FIELDS:
        pillars[name] = {
            "score": scores[name],
            **score_grade(scores[name]),
        }

    return {
        "scorecard": {
            "company_id": company_id,
            "period": latest.period,
            "calculated_at": latest.calculated_at.isoformat() if latest.calculated_at else None,
            "scores": pillars,
            "risk_level": risk_level(scores["overall"]),
            "previous_period": previous_row.period if previous_row else None,
            "change": _deltas(scores, _scores_of(previous_row) if previous_row else None),
        },
        "trends": build_trends(rows),
        "periods": periods,
    }
