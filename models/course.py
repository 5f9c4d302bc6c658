from extensions import db

LEVELS = ("beginner", "intermediate", "advanced")


class Course(db.Model):
    __tablename__ = "courses"

    course_id = db.Column(db.Integer, primary_key=True)
    course_name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)
    course_level = db.Column(db.Enum(*LEVELS, name="course_level"), nullable=False, default="beginner")
    duration = db.Column(db.Integer)
    is_published = db.Column(db.Boolean, default=False)
    category_id = db.Column(
        db.Integer,
        db.ForeignKey("course_categories.category_id"),
        nullable=True
    )
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now()
    )

    batches = db.relationship("Batch", backref="course", lazy=True)
    reviews = db.relationship(
        "CourseReview", backref="course", lazy=True, cascade="all, delete-orphan"
    )

    def average_rating(self):
        if not self.reviews:
            return None
        return round(sum(r.rating for r in self.reviews) / len(self.reviews), 1)

    def to_dict(self):
        return {
            "courseId": self.course_id,
            "courseName": self.course_name,
            "description": self.description,
            "courseLevel": self.course_level,
            "duration": self.duration,
            "isPublished": bool(self.is_published),
            "categoryId": self.category_id,
            "categoryName": self.category.category_name if self.category else None,
            "reviewCount": len(self.reviews),
            "averageRating": self.average_rating(),
        }

    def __repr__(self):
        return f"<Course {self.course_name}>"
