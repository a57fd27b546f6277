"""
Task generation and backlog synchronization.

Three generators propose tasks for a company and period:
- compliance: the readiness next steps (due in 1 / 3 / 7 days by priority)
- expiring-document: evidence expiring within the window (due on expiry)
- missing-data: critical fields missing from the latest snapshots

sync_tasks() inserts the proposals whose source_id has no open task yet and
then sweeps overdue tasks. Re-running it on unchanged data creates nothing.
Manual tasks are never touched by sync, the overdue sweep included; the
standalone `flask mark-overdue` command sweeps them.

Concurrency: the open-task lookup and the insert are separate statements.
Two syncs for the same company can race between them; the partial unique
index on (company_id, source_id) for open tasks rejects the second insert and
store.upsert_task() treats that as "already tracked".
"""

import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from esg_readiness import db, store
from esg_readiness.errors import ValidationError
from esg_readiness.models import (
    AUTO_TASK_SOURCES, OPEN_TASK_STATUSES, PILLARS, TASK_PRIORITIES, TASK_STATUSES, Task,
    utcnow,
)
from esg_readiness.readiness import readiness

logger = logging.getLogger(__name__)

EXPIRY_WINDOW_DAYS = 30

# readiness priority -> (task priority, days until due)
_COMPLIANCE_DUE = {
    "high": ("High", 1),
    "medium": ("Medium", 3),
    "low": ("Low", 7),
}

RELATED_TO = ("Evidence", "Compliance", "Data", "Score")
TASK_PILLARS = PILLARS + ("Overall",)


def _filled(metrics, *keys):
    return any(metrics.get(k) not in (None, "", 0, False) for k in keys)


# (source_id, pillar, title, description, fields that satisfy it, days until due, impact)
_MISSING_DATA_CHECKS = [
    ("env-electricity", "Environmental", "Add electricity consumption data",
     "Electricity data is required for environmental metrics",
     ("electricity_kwh",), 3, "Environment score improvement"),
    ("env-water", "Environmental", "Add water consumption data",
     "Water data is required for environmental metrics",
     ("water_usage_kl",), 3, "Environment score improvement"),
    ("social-employees", "Social", "Add employee count data",
     "Employee count is required for social metrics",
     ("total_employees_permanent", "total_employees"), 7, "Social score improvement"),
    ("gov-board", "Governance", "Add board composition details",
     "Board details are required for governance metrics",
     ("board_members",), 5, "Governance score improvement"),
]


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------

def compliance_tasks(company_id, period, now):
    result = readiness(company_id, period)
    tasks = []
    for step in result["next_steps"]:
        priority, days = _COMPLIANCE_DUE[step["priority"]]
        tasks.append({
            "title": step["action"],
            "description": f"Complete {step['requirement']} for {step['pillar']} area",
            "related_to": "Compliance",
            "pillar": step["pillar"],
            "priority": priority,
            "due_date": now + timedelta(days=days),
            "impact": f"Improves {step['pillar']} compliance",
            "source": "compliance",
            "source_id": f"compliance-{step['requirement_id']}",
        })
    return tasks


def expiring_document_tasks(company_id, now, window_days=EXPIRY_WINDOW_DAYS):
    horizon = now + timedelta(days=window_days)
    tasks = []
    for evidence in store.list_evidence(company_id):
        expiry = evidence.get("expiry_date")
        if expiry is None or not (now <= expiry <= horizon):
            continue
        tasks.append({
            "title": f"Renew expiring document: {evidence['evidence_type']}",
            "description": f"Document expires on {expiry.date().isoformat()}",
            "related_to": "Evidence",
            "pillar": evidence["pillar"],
            "priority": "High",
            "due_date": expiry,
            "impact": "Prevents compliance gap",
            "source": "expiring-document",
            "source_id": f"evidence-{evidence['id']}",
        })
    return tasks


def missing_data_tasks(company_id, period, now):
    metrics = store.get_period_metrics(company_id, period)
    tasks = []
    for source_id, pillar, title, description, fields, days, impact in _MISSING_DATA_CHECKS:
        if _filled(metrics[pillar] or {}, *fields):
            continue
        tasks.append({
            "title": title,
            "description": description,
            "related_to": "Data",
            "pillar": pillar,
            "priority": "High",
            "due_date": now + timedelta(days=days),
            "impact": impact,
            "source": "missing-data",
            "source_id": source_id,
        })
    return tasks


def generate_tasks(company_id, period, now=None, window_days=EXPIRY_WINDOW_DAYS):
    """Candidate tasks from all three generators.

    A generator that fails is logged and skipped; the others still contribute.
    """
    now = now or utcnow()
    blocks = [
        ("compliance", lambda: compliance_tasks(company_id, period, now)),
        ("expiring document", lambda: expiring_document_tasks(company_id, now, window_days)),
        ("missing data", lambda: missing_data_tasks(company_id, period, now)),
    ]
    tasks = []
    for name, generate in blocks:
        try:
            tasks.extend(generate())
        except Exception as e:
            logger.error(f"Error generating {name} tasks for company {company_id}: {e}")
    return tasks


# ---------------------------------------------------------------------------
# Sync
# ---------------------------------------------------------------------------

def sync_tasks(company_id, user_id, period, now=None, window_days=EXPIRY_WINDOW_DAYS):
    """
    Reconcile generated tasks with the company's open backlog.

    Returns dict with created (list of Task), skipped (count of candidates
    already tracked) and overdue (count flipped by the sweep).
    """
    now = now or utcnow()
    candidates = generate_tasks(company_id, period, now=now, window_days=window_days)

    open_ids = {t.source_id for t in store.find_open_tasks(company_id, AUTO_TASK_SOURCES)}

    created = []
    skipped = 0
    for data in candidates:
        if data["source_id"] in open_ids:
            skipped += 1
            continue
        task = store.upsert_task({
            **data,
            "company_id": company_id,
            "user_id": user_id,
            "status": "Pending",
        })
        open_ids.add(data["source_id"])
        if task is None:
            skipped += 1
        else:
            created.append(task)

    overdue = store.mark_overdue(company_id, now, sources=AUTO_TASK_SOURCES)
    logger.info(
        f"Task sync for company {company_id} {period}: {len(created)} created, "
        f"{skipped} already open, {overdue} marked overdue"
    )
    return {"created": created, "skipped": skipped, "overdue": overdue}


# ---------------------------------------------------------------------------
# Manual tasks and status changes
# ---------------------------------------------------------------------------

def create_manual_task(company_id, user_id, title, pillar, due_date,
                       related_to="Data", priority="Medium", description="", impact=""):
    if not title or not str(title).strip():
        raise ValidationError("Title is required")
    if pillar not in TASK_PILLARS:
        raise ValidationError(f"Invalid ESG area: {pillar}")
    if related_to not in RELATED_TO:
        raise ValidationError(f"Invalid related to: {related_to}")
    if priority not in TASK_PRIORITIES:
        raise ValidationError(f"Invalid priority: {priority}")
    if due_date is None:
        raise ValidationError("Valid due date is required")

    return store.upsert_task({
        "company_id": company_id,
        "user_id": user_id,
        "title": str(title).strip(),
        "description": description or "",
        "related_to": related_to,
        "pillar": pillar,
        "priority": priority,
        "status": "Pending",
        "due_date": due_date,
        "impact": impact or "",
        "source": "manual",
        "source_id": None,
    })


def update_task_status(task_id, status, now=None):
    """Move a task to a new status; Completed stamps completed_at. None if no such task.

    Reopening an Overdue or Completed generated task is refused while sync has
    already opened a replacement for the same gap.
    """
    if status not in TASK_STATUSES:
        raise ValidationError(f"Invalid status: {status}")
    task = get_task(task_id)
    if task is None:
        return None

    reopening = status in OPEN_TASK_STATUSES and not task.is_open
    if reopening and task.source_id:
        replacement = store.find_open_task(task.company_id, task.source_id, exclude_id=task.id)
        if replacement is not None:
            raise ValidationError(
                f"Task {replacement.id} already tracks {task.source_id}; "
                "update that task instead"
            )

    task.status = status
    if status == "Completed":
        task.completed_at = now or utcnow()
    else:
        task.completed_at = None
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError(f"An open task already tracks {task.source_id}")
    return task


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

def current_period(now=None):
    now = now or utcnow()
    quarter = (now.month - 1) // 3 + 1
    return f"{now.year}-Q{quarter}"


def due_date_text(due_date, today):
    """Overdue / Today / Tomorrow / "N days" / ISO date, counted in calendar days."""
    diff_days = (due_date.date() - today).days
    if diff_days < 0:
        return "Overdue"
    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Tomorrow"
    if diff_days <= 7:
        return f"{diff_days} days"
    return due_date.date().isoformat()


def task_dashboard(company_id, now=None):
    now = now or utcnow()
    today = now.date()
    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_from_now = start_of_today + timedelta(days=7)
    focus_cutoff = start_of_today + timedelta(days=1)

    tasks = store.list_tasks(company_id)

    stats = {
        "pending_tasks": sum(1 for t in tasks if t.status == "Pending"),
        "overdue_tasks": sum(1 for t in tasks if t.status == "Overdue"),
        "due_this_week": sum(
            1 for t in tasks
            if t.status != "Completed" and start_of_today <= t.due_date <= week_from_now
        ),
        "completed_tasks": sum(1 for t in tasks if t.status == "Completed"),
    }

    today_focus = [
        t for t in tasks
        if t.status == "Pending" and t.priority == "High" and t.due_date <= focus_cutoff
    ][:5]

    table = []
    for t in tasks:
        if t.status == "Completed":
            continue
        row = t.to_dict()
        row["due"] = due_date_text(t.due_date, today)
        table.append(row)

    return {
        "statistics": stats,
        "today_focus": len(today_focus),
        "today_focus_tasks": [t.to_dict() for t in today_focus],
        "task_table": table,
    }


def get_task(task_id):
    return db.session.get(Task, task_id)
