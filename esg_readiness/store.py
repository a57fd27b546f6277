"""
Metric snapshot, evidence, score and task persistence.

The analytic modules only ever talk to these functions, and only get plain
dicts back (canonical metric dicts, company profiles, evidence records), so
they stay independent of the ORM.
"""

import logging

from sqlalchemy.exc import IntegrityError

from esg_readiness import db
from esg_readiness.errors import ValidationError
from esg_readiness.models import (
    Company, ESGScore, Evidence, MetricSnapshot, Task, OPEN_TASK_STATUSES, PILLARS, utcnow,
)
from esg_readiness.normalize import normalize_metrics

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Companies and metric snapshots
# ---------------------------------------------------------------------------

def get_company_profile(company_id):
    company = db.session.get(Company, company_id)
    if company is None:
        return None
    return {
        "id": company.id,
        "name": company.name,
        "industry": company.industry,
        "employee_count": company.employee_count,
        "plan": company.plan,
    }


def save_metric_snapshot(company_id, period, pillar, raw):
    """Normalize and append a new snapshot; the newest one becomes authoritative."""
    if pillar not in PILLARS:
        raise ValidationError(f"Unknown pillar: {pillar}")
    snapshot = MetricSnapshot(
        company_id=company_id,
        period=period,
        pillar=pillar,
        data=normalize_metrics(pillar, raw or {}),
    )
    db.session.add(snapshot)
    db.session.commit()
    return snapshot


def get_latest_metric(company_id, period, pillar):
    """Latest snapshot data for (company, period, pillar), or None."""
    snapshot = (
        MetricSnapshot.query.filter_by(company_id=company_id, period=period, pillar=pillar)
        .order_by(MetricSnapshot.created_at.desc(), MetricSnapshot.id.desc())
        .first()
    )
    if snapshot is None:
        return None
    # Rows written before normalization existed may still carry aliases
    return normalize_metrics(pillar, snapshot.data or {})


def get_period_metrics(company_id, period):
    return {pillar: get_latest_metric(company_id, period, pillar) for pillar in PILLARS}


def list_snapshots(company_id):
    """Snapshot headers (no data) for a company, newest first."""
    rows = (
        MetricSnapshot.query.filter_by(company_id=company_id)
        .order_by(MetricSnapshot.created_at.desc(), MetricSnapshot.id.desc())
        .all()
    )
    return [
        {"id": s.id, "period": s.period, "pillar": s.pillar, "created_at": s.created_at}
        for s in rows
    ]


# ---------------------------------------------------------------------------
# Evidence
# ---------------------------------------------------------------------------

def add_evidence(company_id, evidence_type, pillar, expiry_date=None, file_name=""):
    if pillar not in PILLARS:
        raise ValidationError(f"Unknown pillar: {pillar}")
    if not evidence_type or not str(evidence_type).strip():
        raise ValidationError("Evidence type is required")
    evidence = Evidence(
        company_id=company_id,
        evidence_type=str(evidence_type).strip(),
        pillar=pillar,
        expiry_date=expiry_date,
        file_name=file_name or "",
    )
    db.session.add(evidence)
    db.session.commit()
    return evidence


def list_evidence(company_id):
    rows = Evidence.query.filter_by(company_id=company_id).order_by(Evidence.id).all()
    return [
        {
            "id": e.id,
            "evidence_type": e.evidence_type,
            "pillar": e.pillar,
            "expiry_date": e.expiry_date,
            "file_name": e.file_name,
            "uploaded_at": e.uploaded_at,
        }
        for e in rows
    ]


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

def upsert_score(company_id, period, scores):
    """Create or overwrite the ESGScore row for (company, period)."""
    row = ESGScore.query.filter_by(company_id=company_id, period=period).first()
    if row is None:
        row = ESGScore(company_id=company_id, period=period)
        db.session.add(row)
    row.environmental_score = scores["environmental"]
    row.social_score = scores["social"]
    row.governance_score = scores["governance"]
    row.overall_score = scores["overall"]
    row.calculated_at = utcnow()
    db.session.commit()
    return row


def list_scores(company_id, limit=12):
    """Persisted scores, newest period first."""
    return (
        ESGScore.query.filter_by(company_id=company_id)
        .order_by(ESGScore.period.desc())
        .limit(limit)
        .all()
    )


def get_score(company_id, period):
    return ESGScore.query.filter_by(company_id=company_id, period=period).first()


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

def find_open_tasks(company_id, sources):
    return (
        Task.query.filter(
            Task.company_id == company_id,
            Task.status.in_(OPEN_TASK_STATUSES),
            Task.source.in_(list(sources)),
        )
        .order_by(Task.due_date)
        .all()
    )


def find_open_task(company_id, source_id, exclude_id=None):
    """The open task tracking source_id, if any (optionally ignoring one task)."""
    query = Task.query.filter(
        Task.company_id == company_id,
        Task.source_id == source_id,
        Task.status.in_(OPEN_TASK_STATUSES),
    )
    if exclude_id is not None:
        query = query.filter(Task.id != exclude_id)
    return query.first()


def upsert_task(data):
    """Insert a task unless an open task with the same source_id already exists.

    Returns the new Task, or None when the gap is already tracked. The check is
    backed by the partial unique index on open tasks, so a concurrent sync that
    slips in between check and insert surfaces as an IntegrityError here.
    """
    source_id = data.get("source_id")
    if source_id and find_open_task(data["company_id"], source_id) is not None:
        return None

    task = Task(**data)
    db.session.add(task)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.info(f"Open task {source_id} for company {data['company_id']} already exists")
        return None
    return task


def mark_overdue(company_id, now=None, sources=None):
    """Flip open tasks past their due date to Overdue. Returns the count.

    company_id=None sweeps every company (used by the CLI); sources limits the
    sweep to tasks from those sources.
    """
    now = now or utcnow()
    query = Task.query.filter(
        Task.status.in_(OPEN_TASK_STATUSES),
        Task.due_date < now,
    )
    if company_id is not None:
        query = query.filter(Task.company_id == company_id)
    if sources is not None:
        query = query.filter(Task.source.in_(list(sources)))
    count = query.update(
        {Task.status: "Overdue", Task.updated_at: now}, synchronize_session="fetch"
    )
    db.session.commit()
    return count


def list_tasks(company_id, pillar=None, priority=None, status=None):
    query = Task.query.filter_by(company_id=company_id)
    if pillar:
        query = query.filter_by(pillar=pillar)
    if priority:
        query = query.filter_by(priority=priority)
    if status:
        query = query.filter_by(status=status)
    return query.order_by(Task.due_date).all()
