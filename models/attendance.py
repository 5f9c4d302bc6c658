from extensions import db

STATUSES = ("present", "absent", "late")


class Attendance(db.Model):
    __tablename__ = "attendance"

    attendance_id = db.Column(db.Integer, primary_key=True)

    schedule_id = db.Column(
        db.Integer,
        db.ForeignKey("schedules.schedule_id"),
        nullable=False
    )

    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=False
    )

    marked_by = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=True
    )

    status = db.Column(db.Enum(*STATUSES, name="attendance_status"), nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now()
    )

    user = db.relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        db.UniqueConstraint("schedule_id", "user_id", name="unique_schedule_user"),
    )

    def to_dict(self):
        return {
            "attendanceId": self.attendance_id,
            "scheduleId": self.schedule_id,
            "userId": self.user_id,
            "status": self.status,
            "markedBy": self.marked_by,
        }

    def __repr__(self):
        return f"<Attendance user={self.user_id} schedule={self.schedule_id}>"
