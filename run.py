import click

from esg_readiness import create_app, db, store
from esg_readiness.task_service import sync_tasks

app = create_app()


@app.cli.command("init-db")
def init_db():
    """Initialize the database."""
    db.create_all()
    print("Database initialized.")


@app.cli.command("sync-tasks")
@click.argument("company_id", type=int)
@click.argument("period")
@click.option("--user-id", type=int, default=None, help="User the generated tasks are assigned to.")
def sync_tasks_command(company_id, period, user_id):
    """Generate and reconcile tasks for one company and period."""
    if store.get_company_profile(company_id) is None:
        raise click.ClickException(f"Company not found: {company_id}")
    result = sync_tasks(
        company_id, user_id, period,
        window_days=app.config.get("ESG_EVIDENCE_EXPIRY_DAYS", 30),
    )
    print(
        f"{len(result['created'])} created, {result['skipped']} already open, "
        f"{result['overdue']} marked overdue"
    )


@app.cli.command("mark-overdue")
def mark_overdue():
    """Flip every open task past its due date to Overdue, manual tasks included."""
    count = store.mark_overdue(None)
    print(f"{count} task(s) marked overdue.")


if __name__ == "__main__":
    with app.app_context():
        db.create_all()
    app.run(debug=True, host="0.0.0.0", port=5000)
