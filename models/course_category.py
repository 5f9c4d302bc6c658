from extensions import db


class CourseCategory(db.Model):
    __tablename__ = "course_categories"

    category_id = db.Column(db.Integer, primary_key=True)
    category_name = db.Column(db.String(100), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    courses = db.relationship("Course", backref="category", lazy=True)

    def to_dict(self):
        return {
            "categoryId": self.category_id,
            "categoryName": self.category_name,
            "courseCount": len(self.courses),
        }

    def __repr__(self):
        return f"<CourseCategory {self.category_name}>"
