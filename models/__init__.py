from .user import User
from .course_category import CourseCategory
from .course import Course
from .course_review import CourseReview
from .batch import Batch
from .student_batch import StudentBatch
from .schedule import Schedule
from .resource import Resource
from .attendance import Attendance
from .batch_feedback import BatchFeedback

__all__ = [
    "User", "CourseCategory", "Course", "CourseReview", "Batch", "StudentBatch",
    "Schedule", "Resource", "Attendance", "BatchFeedback"
]
