from extensions import db
from flask_login import UserMixin

ROLES = ("admin", "instructor", "student")


class User(UserMixin, db.Model):
    __tablename__ = "users"

    user_id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(*ROLES, name="user_role"), nullable=False, default="student")
    phone_number = db.Column(db.String(20))
    address = db.Column(db.String(255))
    must_reset_password = db.Column(db.Boolean, default=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now()
    )

    student_batches = db.relationship(
        "StudentBatch",
        backref="student",
        lazy=True,
        cascade="all, delete-orphan"
    )

    # Flask-Login looks for "id", our column is "user_id".
    def get_id(self):
        return str(self.user_id)

    def to_dict(self):
        return {
            "userId": self.user_id,
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role,
            "phoneNumber": self.phone_number,
            "address": self.address,
            "mustResetPassword": bool(self.must_reset_password),
            "isActive": bool(self.is_active),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<User {self.email}>"
