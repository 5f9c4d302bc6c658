from extensions import db


class StudentBatch(db.Model):
    __tablename__ = "student_batches"

    id = db.Column(db.Integer, primary_key=True)

    student_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=False
    )

    batch_id = db.Column(
        db.Integer,
        db.ForeignKey("batches.batch_id"),
        nullable=False
    )

    enrollment_date = db.Column(db.DateTime, server_default=db.func.now())

    __table_args__ = (
        db.UniqueConstraint("student_id", "batch_id", name="unique_student_batch"),
    )

    def __repr__(self):
        return f"<StudentBatch student={self.student_id} batch={self.batch_id}>"
