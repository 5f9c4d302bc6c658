from extensions import db


class CourseReview(db.Model):
    __tablename__ = "course_reviews"

    review_id = db.Column(db.Integer, primary_key=True)

    course_id = db.Column(
        db.Integer,
        db.ForeignKey("courses.course_id"),
        nullable=False
    )

    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=False
    )

    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    user = db.relationship("User")

    # One review per user per course
    __table_args__ = (
        db.UniqueConstraint("course_id", "user_id", name="unique_course_user_review"),
    )

    def to_dict(self):
        return {
            "reviewId": self.review_id,
            "courseId": self.course_id,
            "userId": self.user_id,
            "userName": self.user.full_name if self.user else None,
            "rating": self.rating,
            "comment": self.comment,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<CourseReview course={self.course_id} user={self.user_id}>"
