from datetime import datetime

from extensions import db

RESOURCE_TYPES = ("assignment", "recording")


class Resource(db.Model):
    __tablename__ = "resources"

    resource_id = db.Column(db.Integer, primary_key=True)
    batch_id = db.Column(
        db.Integer,
        db.ForeignKey("batches.batch_id"),
        nullable=False
    )
    uploaded_by = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=True
    )
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    resource_type = db.Column(db.Enum(*RESOURCE_TYPES, name="resource_type"), nullable=False)
    file_url = db.Column(db.String(500), nullable=False)
    file_name = db.Column(db.String(255))
    # Position within the batch is derived from this, never stored
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.Index("ix_resources_batch_created", "batch_id", "created_at"),
    )

    def to_dict(self):
        return {
            "resourceId": self.resource_id,
            "batchId": self.batch_id,
            "uploadedBy": self.uploaded_by,
            "title": self.title,
            "description": self.description,
            "resourceType": self.resource_type,
            "fileUrl": self.file_url,
            "fileName": self.file_name,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Resource {self.resource_id} batch={self.batch_id}>"
