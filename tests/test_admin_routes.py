import json

import pytest

from barbershop.config import Config
from main import create_app


@pytest.mark.admin
class TestAdminRoutes:
    """Test suite for the database administration endpoints."""

    def test_home(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert json.loads(response.data) == {"status": "ok", "message": "Backend is running!"}

    def test_db_check(self, client):
        response = client.get("/api/db-check")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["status"] == "ok"
        assert data["database"] == "sqlite (memory)"

    def test_db_status(self, client):
        response = client.get("/api/db-status")

        assert response.status_code == 200
        assert json.loads(response.data) == {
            "connected": True,
            "mock": False,
            "message": "Database connection successful",
        }

    def test_db_init(self, client):
        response = client.get("/api/db-init")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["seeded"] is True
        assert data["migrations"] == []

        # running it again changes nothing
        again = json.loads(client.get("/api/db-init").data)
        assert again["success"] is True
        assert again["migrations"] == []

    def test_db_reset(self, client, app):
        client.get("/api/db-init")
        app.extensions["connection"].store.query("DELETE FROM products")

        response = client.get("/api/db-reset")

        assert response.status_code == 200
        assert json.loads(response.data)["status"] == "success"
        rows = app.extensions["connection"].store.query("SELECT COUNT(*) AS count FROM products")
        assert rows[0]["count"] == 5

    def test_api_docs(self, client):
        response = client.get("/apispec.json")

        assert response.status_code == 200
        spec = json.loads(response.data)
        assert spec["info"]["title"] == "Barbershop Backend API"
        assert "DashboardStats" in spec["definitions"]


@pytest.mark.admin
class TestAdminRoutesWithoutDatabase:
    """Endpoints served by the in-memory mock store."""

    def test_db_check_without_url(self, mock_client):
        response = mock_client.get("/api/db-check")

        assert response.status_code == 200
        assert json.loads(response.data) == {
            "status": "error",
            "message": "DATABASE_URL environment variable not set",
        }

    def test_db_status_reports_mock(self, mock_client):
        data = json.loads(mock_client.get("/api/db-status").data)

        assert data["connected"] is True
        assert data["mock"] is True

    def test_db_init_on_mock(self, mock_client):
        response = mock_client.get("/api/db-init")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["mock"] is True

    def test_db_reset_on_mock(self, mock_client):
        response = mock_client.get("/api/db-reset")

        assert response.status_code == 200
        assert json.loads(response.data)["status"] == "success"


@pytest.mark.dashboard
class TestDashboardRoute:
    """Test suite for the dashboard statistics endpoint."""

    def test_dashboard_stats(self, client):
        client.get("/api/db-init")

        response = client.get("/api/dashboard-stats")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert set(data) == {
            "todayAppointments",
            "totalAppointments",
            "totalCustomers",
            "newCustomers",
            "weeklyRevenue",
        }
        assert data["totalAppointments"] == 4
        assert data["totalCustomers"] == 4

    def test_dashboard_stats_before_init(self, client):
        response = client.get("/api/dashboard-stats")

        assert response.status_code == 200
        assert json.loads(response.data)["totalAppointments"] == 0

    def test_dashboard_stats_on_mock(self, mock_client):
        response = mock_client.get("/api/dashboard-stats")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["todayAppointments"]["count"] == 0
        assert data["weeklyRevenue"] == 0.0

    def test_dashboard_stats_error(self, client, monkeypatch):
        import barbershop.routes.dashboard as dashboard_routes

        def boom(store):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(dashboard_routes, "get_dashboard_stats", boom)

        response = client.get("/api/dashboard-stats")

        assert response.status_code == 500
        assert json.loads(response.data) == {
            "error": "Failed to fetch dashboard stats",
            "message": "store unavailable",
        }


class StartupConfig(Config):
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    INIT_DB_ON_STARTUP = True


@pytest.mark.admin
class TestStartupInitialization:
    """Test suite for initializing the database while the app is created."""

    def test_tables_ready_without_db_init(self):
        app = create_app(StartupConfig)
        try:
            data = json.loads(app.test_client().get("/api/dashboard-stats").data)
        finally:
            app.extensions["connection"].dispose()

        assert data["totalCustomers"] == 4
