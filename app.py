import logging

import click
from flask import Flask, jsonify
from flask_migrate import Migrate

from config import Config
from datastore import build_datastore, get_datastore, seed
from domain import UserRole
from models import db
from routes import ALL_BLUEPRINTS
from security.session import create_session
from services.errors import SportNexusError
from services.notifications import NotificationBus
from utils.auth_context import load_current_user

logger = logging.getLogger(__name__)


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Register routes
    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Data access layer + in-process notification fan-out
    bus = NotificationBus()
    app.extensions["notification_bus"] = bus

    with app.app_context():
        if app.config.get("TESTING"):
            db.create_all()
        build_datastore(app, bus)

    @app.before_request
    def _load_user():
        load_current_user()

    @app.errorhandler(SportNexusError)
    def _domain_error(e):
        if e.status_code >= 500:
            logger.error("%s: %s", type(e).__name__, e.message)
        return jsonify(error=e.message), e.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------

def register_cli(app):
    @app.cli.command("seed-demo")
    def seed_demo():
        """Load demo venues, equipment and tutorials into the active data store."""
        owner = seed(get_datastore())
        print(f"Demo data seeded (owner: {owner.email})")

    @app.cli.command("issue-token")
    @click.argument("email")
    @click.option("--role", type=click.Choice(UserRole.ALL), default=None,
                  help="Create the user with this role, or change it if they exist.")
    def issue_token(email, role):
        """Print a session token for EMAIL, creating the profile if needed."""
        store = get_datastore()
        profile = store.get_profile_by_email(email)
        if profile is None:
            profile = store.create_profile(email, role=role or UserRole.USER)
        elif role and profile.role != role:
            profile = store.change_user_role(profile.id, role)

        token = create_session(profile.id)
        print(f"{profile.email} ({profile.role}): {token}")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
