from flask import Blueprint, current_app, jsonify

from ..extensions import get_connection
from ..services.bootstrap import initialize_database, reset_database
from ..services.connection import describe_database

admin_bp = Blueprint("admin", __name__, url_prefix="/api")


# -----------------------------------------------------------------------------
# Administrative endpoints.
# Every response is HTTP 200; failures are reported in the JSON body.
# -----------------------------------------------------------------------------
@admin_bp.route("/db-check", methods=["GET"])
def db_check():
    """
    Validate the configured connection string without connecting
    ---
    tags:
      - Database
    responses:
      200:
        description: Connection string status
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            message:
              type: string
            database:
              type: string
    """
    try:
        url = current_app.config.get("SQLALCHEMY_DATABASE_URI")
        if not url:
            current_app.logger.error("DATABASE_URL environment variable not set")
            return (
                jsonify(
                    {
                        "status": "error",
                        "message": "DATABASE_URL environment variable not set",
                    }
                ),
                200,
            )

        return jsonify(
            {
                "status": "ok",
                "message": "Database URL is valid",
                "database": describe_database(url),
            }
        )
    except Exception as e:
        current_app.logger.error(f"Unexpected error in db-check: {e}")
        return jsonify({"status": "error", "message": str(e)}), 200


@admin_bp.route("/db-status", methods=["GET"])
def db_status():
    """
    Run a connectivity check against the database
    ---
    tags:
      - Database
    responses:
      200:
        description: Connectivity result
        schema:
          type: object
          properties:
            connected:
              type: boolean
            mock:
              type: boolean
            message:
              type: string
    """
    try:
        timeout = current_app.config.get("DB_STATUS_TIMEOUT", 5.0)
        return jsonify(get_connection().check_status(timeout=timeout))
    except Exception as e:
        current_app.logger.error(f"Database status check failed: {e}")
        return jsonify({"connected": False, "message": str(e)}), 200


@admin_bp.route("/db-init", methods=["GET"])
def db_init():
    """
    Create missing tables, apply migrations and seed empty tables
    ---
    tags:
      - Database
    responses:
      200:
        description: Initialization result
        schema:
          type: object
          properties:
            success:
              type: boolean
            message:
              type: string
            migrations:
              type: array
              items:
                type: string
            seeded:
              type: boolean
    """
    try:
        result = initialize_database(get_connection())
        if not result["success"]:
            current_app.logger.error(f"db-init failed: {result['message']}")
        return jsonify(result), 200
    except Exception as e:
        current_app.logger.error(f"Error initializing database: {e}")
        return jsonify({"success": False, "message": str(e)}), 200


@admin_bp.route("/db-reset", methods=["GET"])
def db_reset():
    """
    Drop all tables, recreate them and reseed
    ---
    tags:
      - Database
    responses:
      200:
        description: Reset result
        schema:
          type: object
          properties:
            status:
              type: string
              example: success
            message:
              type: string
    """
    try:
        result = reset_database(get_connection())
        if result["status"] != "success":
            current_app.logger.error(f"db-reset failed: {result['message']}")
        return jsonify(result), 200
    except Exception as e:
        current_app.logger.error(f"Error resetting database: {e}")
        return jsonify({"status": "error", "message": str(e)}), 200
