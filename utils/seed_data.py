import logging
import os

from werkzeug.security import generate_password_hash

from extensions import db
from models.user import User

logger = logging.getLogger(__name__)


def seed_admin():
    email = os.getenv("ADMIN_EMAIL", "admin@lms.com")
    existing = User.query.filter_by(email=email).first()

    if not existing:
        db.session.add(
            User(
                full_name="Admin",
                email=email,
                role="admin",
                password_hash=generate_password_hash(os.getenv("ADMIN_DEFAULT_PASSWORD", "Admin@123")),
                must_reset_password=False,
                is_active=True
            )
        )
        db.session.commit()
        logger.info("Admin user %s created", email)
    else:
        logger.info("Admin user %s already present", email)


def run_seed():
    seed_admin()
