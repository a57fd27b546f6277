import os
import logging

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy

from config import Config

db = SQLAlchemy()

_startup_errors = []


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)

    # Gzip compression for the JSON responses
    from flask_compress import Compress
    Compress(app)

    from esg_readiness.esg.routes import esg_bp
    from esg_readiness.compliance.routes import compliance_bp
    from esg_readiness.tasks.routes import tasks_bp

    app.register_blueprint(esg_bp)
    app.register_blueprint(compliance_bp)
    app.register_blueprint(tasks_bp)

    _register_error_handlers(app, logger)

    @app.route("/health")
    def health():
        """App status and database connectivity."""
        db_url = app.config["SQLALCHEMY_DATABASE_URI"]
        db_type = db_url.split("://")[0] if "://" in db_url else "sqlite"

        db_ok = False
        db_error = None
        tables = []
        try:
            from sqlalchemy import inspect, text
            db.session.execute(text("SELECT 1"))
            db_ok = True
            tables = inspect(db.engine).get_table_names()
        except Exception as e:
            db_error = str(e)

        return jsonify({
            "status": "ok" if db_ok else "db_error",
            "database_type": db_type,
            "database_connected": db_ok,
            "database_error": db_error,
            "tables": tables,
            "startup_errors": _startup_errors,
        })

    with app.app_context():
        from esg_readiness import models  # noqa: F401  (register tables)
        try:
            db.create_all()
            logger.info("Database tables created/verified.")
        except Exception as e:
            msg = f"db.create_all() failed: {e}"
            logger.error(msg)
            _startup_errors.append(msg)

    return app


def _register_error_handlers(app, logger):
    from esg_readiness.errors import (
        CompanyNotFoundError, ComputationError, MissingMetricsError, ValidationError,
    )

    @app.errorhandler(MissingMetricsError)
    def missing_metrics(error):
        return jsonify({
            "error": str(error),
            "period": error.period,
            "missing_pillars": error.pillars,
        }), 422

    @app.errorhandler(CompanyNotFoundError)
    def company_not_found(error):
        return jsonify({"error": str(error)}), 404

    @app.errorhandler(ComputationError)
    def computation_error(error):
        logger.error(f"Score computation error: {error}")
        return jsonify({"error": str(error), "kind": "computation"}), 500

    @app.errorhandler(ValidationError)
    def bad_request(error):
        return jsonify({"error": str(error)}), 400

    @app.errorhandler(500)
    def internal_error(error):
        try:
            db.session.rollback()
        except Exception:
            logger.exception("Rollback after server error failed")
        original = getattr(error, "original_exception", None) or error
        logger.error(f"500 error: {type(original).__name__}: {original}")
        return jsonify({"error": "Server error"}), 500
