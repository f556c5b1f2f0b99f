from flask import Blueprint, current_app, jsonify

from ..actions.dashboard import get_dashboard_stats
from ..extensions import get_store

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api")


@dashboard_bp.route("/dashboard-stats", methods=["GET"])
def dashboard_stats():
    """
    Today's appointment counts and overall totals
    ---
    tags:
      - Dashboard
    responses:
      200:
        description: Dashboard statistics
        schema:
          $ref: '#/definitions/DashboardStats'
      500:
        description: Unexpected error
        schema:
          $ref: '#/definitions/Error'
    """
    try:
        return jsonify(get_dashboard_stats(get_store()))
    except Exception as e:
        current_app.logger.error(f"Error fetching dashboard stats: {e}")
        return (
            jsonify({"error": "Failed to fetch dashboard stats", "message": str(e)}),
            500,
        )
