import logging

import click
from flask import Flask, jsonify
from flask_migrate import Migrate

from config.config import get_config
from extensions import db, login_manager

# Route Imports
from routes.auth_routes import auth_bp
from routes.user_routes import users_bp
from routes.category_routes import categories_bp
from routes.course_routes import courses_bp
from routes.batch_routes import batches_bp
from routes.schedule_routes import schedules_bp
from routes.resource_routes import resources_bp
from routes.feedback_routes import feedback_bp
from routes.attendance_routes import attendance_bp
from routes.instructor_routes import instructors_bp
from routes.dashboard_routes import dashboard_bp

from models import User
from utils.errors import api_error
from utils.logging_setup import configure_logging
from utils.seed_data import run_seed

migrate = Migrate()
logger = logging.getLogger(__name__)


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or get_config())

    configure_logging(app)

    # Initialize Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return api_error("Authentication required", 401)

    # Register Blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(courses_bp)
    app.register_blueprint(batches_bp)
    app.register_blueprint(schedules_bp)
    app.register_blueprint(resources_bp)
    app.register_blueprint(feedback_bp)
    app.register_blueprint(attendance_bp)
    app.register_blueprint(instructors_bp)
    app.register_blueprint(dashboard_bp)

    @app.errorhandler(404)
    def not_found(_):
        return api_error("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_):
        return api_error("Method not allowed", 405)

    @app.errorhandler(500)
    def server_error(exc):
        db.session.rollback()
        logger.error("Unhandled error: %s", exc)
        return api_error("Internal server error", 500)

    @app.route("/api/health")
    def health():
        return jsonify({"success": True, "status": "ok"})

    @app.cli.command("seed")
    def seed_command():
        """Create the default admin account."""
        run_seed()
        click.echo("Seed complete")

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=True)
