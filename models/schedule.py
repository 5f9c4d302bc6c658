from extensions import db


class Schedule(db.Model):
    __tablename__ = "schedules"

    schedule_id = db.Column(db.Integer, primary_key=True)
    batch_id = db.Column(
        db.Integer,
        db.ForeignKey("batches.batch_id"),
        nullable=False
    )
    topic = db.Column(db.String(150))
    schedule_date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.Time)
    end_time = db.Column(db.Time)
    meeting_link = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    attendance_records = db.relationship(
        "Attendance", backref="schedule", lazy=True, cascade="all, delete-orphan"
    )

    def to_dict(self):
        return {
            "scheduleId": self.schedule_id,
            "batchId": self.batch_id,
            "topic": self.topic,
            "scheduleDate": self.schedule_date.isoformat() if self.schedule_date else None,
            "startTime": self.start_time.strftime("%H:%M") if self.start_time else None,
            "endTime": self.end_time.strftime("%H:%M") if self.end_time else None,
            "meetingLink": self.meeting_link,
        }

    def __repr__(self):
        return f"<Schedule {self.schedule_id} {self.schedule_date}>"
