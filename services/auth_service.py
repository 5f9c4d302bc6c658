import secrets

from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db
from models.user import User

# Look-alike characters (0/O, 1/l/I) are left out of generated passwords
PASSWORD_GROUPS = (
    "ABCDEFGHJKLMNPQRSTUVWXYZ",
    "abcdefghijkmnpqrstuvwxyz",
    "23456789",
    "!@#$%^&*",
)


def authenticate_user(email: str, password: str, role: str = None):
    user = User.query.filter_by(email=email).first()

    if not user:
        return None

    if role and user.role != role:
        return None

    if not check_password_hash(user.password_hash, password):
        return None

    if user.is_active is False:
        return None

    return user


def change_password(user: User, current_password: str, new_password: str):
    if not check_password_hash(user.password_hash, current_password):
        return False

    user.password_hash = generate_password_hash(new_password)
    user.must_reset_password = False
    db.session.commit()
    return True


def generate_password(length: int = 10) -> str:
    """Random password holding at least one character of every group."""
    length = max(length, len(PASSWORD_GROUPS))
    chars = [secrets.choice(group) for group in PASSWORD_GROUPS]
    pool = "".join(PASSWORD_GROUPS)
    chars += [secrets.choice(pool) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def regenerate_password(user: User, length: int = 10) -> str:
    """Replace the user's password and force a reset at next login."""
    password = generate_password(length)
    user.password_hash = generate_password_hash(password)
    user.must_reset_password = True
    db.session.commit()
    return password
