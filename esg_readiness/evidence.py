"""
Evidence dashboard: document counts and the expiry picture for a company.
"""

from datetime import timedelta

from esg_readiness import store
from esg_readiness.models import utcnow

EXPIRING_SOON_DAYS = 30


def _iso(value):
    return value.isoformat() if value else None


def evidence_dashboard(company_id, now=None, window_days=EXPIRING_SOON_DAYS):
    """
    Returns dict with statistics (total_documents, expiring_soon, expired)
    and evidence_table rows in upload order.

    expiring_soon counts documents with now < expiry <= now + window_days.
    """
    now = now or utcnow()
    horizon = now + timedelta(days=window_days)
    evidence = store.list_evidence(company_id)

    expiring_soon = 0
    expired = 0
    table = []
    for e in evidence:
        expiry = e["expiry_date"]
        if expiry is not None and now < expiry <= horizon:
            expiring_soon += 1
        elif expiry is not None and expiry <= now:
            expired += 1
        table.append({
            "id": e["id"],
            "evidence_type": e["evidence_type"],
            "pillar": e["pillar"],
            "file_name": e["file_name"] or "-",
            "expiry_date": _iso(expiry),
            "uploaded_at": _iso(e["uploaded_at"]),
        })

    return {
        "statistics": {
            "total_documents": len(evidence),
            "expiring_soon": expiring_soon,
            "expired": expired,
        },
        "evidence_table": table,
    }
