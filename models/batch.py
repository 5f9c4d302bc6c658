from extensions import db


class Batch(db.Model):
    __tablename__ = "batches"

    batch_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    batch_name = db.Column(db.String(100), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.course_id"), nullable=False)
    instructor_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=True)
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)
    capacity = db.Column(db.Integer, nullable=False, default=30)
    meeting_link = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    instructor = db.relationship("User", foreign_keys=[instructor_id])
    students = db.relationship(
        "StudentBatch", backref="batch", lazy=True, cascade="all, delete-orphan"
    )
    schedules = db.relationship(
        "Schedule", backref="batch", lazy=True, cascade="all, delete-orphan"
    )
    resources = db.relationship(
        "Resource", backref="batch", lazy=True, cascade="all, delete-orphan"
    )
    feedback = db.relationship(
        "BatchFeedback", backref="batch", lazy=True, cascade="all, delete-orphan"
    )

    def student_ids(self):
        return [sb.student_id for sb in self.students]

    def to_dict(self):
        return {
            "batchId": self.batch_id,
            "batchName": self.batch_name,
            "courseId": self.course_id,
            "instructorId": self.instructor_id,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "capacity": self.capacity,
            "meetingLink": self.meeting_link,
            "studentCount": len(self.students),
        }

    def __repr__(self):
        return f"<Batch {self.batch_name}>"
