from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv
from flasgger import Swagger
from swagger__config import SWAGGER_CONFIG, SWAGGER_TEMPLATE
import logging
import os

load_dotenv()
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
from barbershop.config import Config  # noqa: E402
from barbershop.cli import register_commands  # noqa: E402
from barbershop.extensions import init_connection  # noqa: E402
from barbershop.routes.admin import admin_bp  # noqa: E402
from barbershop.routes.dashboard import dashboard_bp  # noqa: E402
from barbershop.services.bootstrap import initialize_database  # noqa: E402


def create_app(config_class=Config):
    app = Flask(__name__)
    try:
        app.config.from_object(config_class)
        app.logger.info(f"Config loaded: {len(app.config)} items")

        CORS(app)

        connection = init_connection(app)
        app.logger.info(
            "Data store: "
            + ("in-memory mock" if connection.is_mock else connection.store.describe())
        )

        # Determine host based on environment
        host = os.environ.get("API_HOST", "127.0.0.1:5000")
        swagger_template = SWAGGER_TEMPLATE.copy()
        swagger_template["host"] = host
        Swagger(app, config=SWAGGER_CONFIG, template=swagger_template)
        app.logger.info("Swagger initialized - Access at /api/docs")

        blueprints = [
            admin_bp,
            dashboard_bp,
        ]

        for bp in blueprints:
            app.register_blueprint(bp)
            app.logger.info(f"  ✓ {bp.name} registered")

        register_commands(app)

        @app.route("/")
        def home():
            """
            Root endpoint - API status
            ---
            tags:
              - Utility
            responses:
              200:
                description: API is running
                schema:
                  type: object
                  properties:
                    status:
                      type: string
                    message:
                      type: string
            """
            return {"status": "ok", "message": "Backend is running!"}, 200

        if app.config.get("INIT_DB_ON_STARTUP"):
            result = initialize_database(connection)
            if result["success"]:
                app.logger.info(result["message"])
            else:
                app.logger.error(f"Startup database initialization failed: {result['message']}")

        app.logger.info(f"Total routes registered: {len(list(app.url_map.iter_rules()))}")

    except Exception as e:
        app.logger.exception(f"Error during app creation: {e}")
        raise

    return app


app = create_app()


if __name__ == "__main__":
    # Create a .env containing:
    #       DATABASE_URL=postgresql://<USER>:<PASSWORD>@<HOST>/<DATABASE>
    # Without it the app runs against the in-memory mock store.
    port = int(os.environ.get("PORT", 5000))
    app.run(
        host="0.0.0.0", port=port, debug=os.environ.get("FLASK_ENV") != "production"
    )
