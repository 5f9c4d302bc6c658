from extensions import db


class BatchFeedback(db.Model):
    __tablename__ = "batch_feedback"

    feedback_id = db.Column(db.Integer, primary_key=True)

    batch_id = db.Column(
        db.Integer,
        db.ForeignKey("batches.batch_id"),
        nullable=False
    )

    student_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=False
    )

    interval = db.Column(db.Integer, nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    feedback = db.Column(db.Text)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now()
    )

    __table_args__ = (
        db.UniqueConstraint("batch_id", "student_id", "interval", name="unique_batch_student_interval"),
    )

    def to_dict(self):
        return {
            "feedbackId": self.feedback_id,
            "batchId": self.batch_id,
            "studentId": self.student_id,
            "interval": self.interval,
            "rating": self.rating,
            "feedback": self.feedback,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<BatchFeedback batch={self.batch_id} student={self.student_id} interval={self.interval}>"
