from datetime import datetime, timezone

from sqlalchemy import text

from esg_readiness import db

PILLARS = ("Environmental", "Social", "Governance")

TASK_PRIORITIES = ("High", "Medium", "Low")
TASK_STATUSES = ("Pending", "In Progress", "Completed", "Overdue")
OPEN_TASK_STATUSES = ("Pending", "In Progress")
TASK_SOURCES = ("compliance", "missing-data", "expiring-document", "recommendation", "manual")
AUTO_TASK_SOURCES = ("compliance", "missing-data", "expiring-document")


def utcnow():
    """Naive UTC timestamp; SQLite hands DateTime columns back without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Company(db.Model):
    __tablename__ = "companies"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(256), nullable=False)
    industry = db.Column(db.String(100), default="Others")
    employee_count = db.Column(db.Integer, nullable=True)
    plan = db.Column(db.String(20), default="starter")
    # Plan: starter, pro, enterprise
    created_at = db.Column(db.DateTime, default=utcnow)

    snapshots = db.relationship(
        "MetricSnapshot", backref="company", lazy="dynamic", cascade="all, delete-orphan"
    )
    evidence = db.relationship(
        "Evidence", backref="company", lazy="dynamic", cascade="all, delete-orphan"
    )
    tasks = db.relationship(
        "Task", backref="company", lazy="dynamic", cascade="all, delete-orphan"
    )


class MetricSnapshot(db.Model):
    """One pillar's metrics for a period. Edits append new rows; the latest wins."""
    __tablename__ = "metric_snapshots"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    period = db.Column(db.String(20), nullable=False)
    pillar = db.Column(db.String(20), nullable=False)
    data = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.Index("ix_snapshot_lookup", "company_id", "period", "pillar", "created_at"),
    )


class Evidence(db.Model):
    __tablename__ = "evidence"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    evidence_type = db.Column(db.String(200), nullable=False)
    # e.g. "Electricity Bill", "POSH Policy", "Waste Disposal Certificate"
    pillar = db.Column(db.String(20), nullable=False, default="Environmental")
    file_name = db.Column(db.String(256), default="")
    expiry_date = db.Column(db.DateTime, nullable=True, index=True)
    uploaded_at = db.Column(db.DateTime, default=utcnow)


class ESGScore(db.Model):
    __tablename__ = "esg_scores"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    period = db.Column(db.String(20), nullable=False)
    environmental_score = db.Column(db.Float, nullable=False)
    social_score = db.Column(db.Float, nullable=False)
    governance_score = db.Column(db.Float, nullable=False)
    overall_score = db.Column(db.Float, nullable=False)
    calculated_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint("company_id", "period", name="uq_score_company_period"),
    )

    def to_dict(self):
        return {
            "company_id": self.company_id,
            "period": self.period,
            "environmental_score": self.environmental_score,
            "social_score": self.social_score,
            "governance_score": self.governance_score,
            "overall_score": self.overall_score,
            "calculated_at": self.calculated_at.isoformat() if self.calculated_at else None,
        }


_open_status_clause = text("status IN ('Pending', 'In Progress')")


class Task(db.Model):
    __tablename__ = "tasks"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    user_id = db.Column(db.Integer, nullable=True)
    title = db.Column(db.String(256), nullable=False)
    description = db.Column(db.Text, default="")
    related_to = db.Column(db.String(20), nullable=False, default="Data")
    # Related to: Evidence, Compliance, Data, Score
    pillar = db.Column(db.String(20), nullable=False)
    # Pillar: Environmental, Social, Governance, Overall
    priority = db.Column(db.String(10), nullable=False, default="Medium")
    status = db.Column(db.String(20), nullable=False, default="Pending")
    due_date = db.Column(db.DateTime, nullable=False)
    impact = db.Column(db.String(256), default="")
    source = db.Column(db.String(30), nullable=False, default="manual")
    source_id = db.Column(db.String(100), nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.Index("ix_task_company_status", "company_id", "status"),
        db.Index("ix_task_company_due", "company_id", "due_date"),
        # At most one open task per gap; manual tasks have no source_id
        db.Index(
            "uq_task_open_source",
            "company_id",
            "source_id",
            unique=True,
            sqlite_where=_open_status_clause,
            postgresql_where=_open_status_clause,
        ),
    )

    @property
    def is_open(self):
        return self.status in OPEN_TASK_STATUSES

    def to_dict(self):
        return {
            "id": self.id,
            "company_id": self.company_id,
            "title": self.title,
            "description": self.description,
            "related_to": self.related_to,
            "pillar": self.pillar,
            "priority": self.priority,
            "status": self.status,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "impact": self.impact,
            "source": self.source,
            "source_id": self.source_id,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
