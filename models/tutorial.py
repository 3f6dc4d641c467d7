from datetime import datetime
from models.db import db


class Tutorial(db.Model):
    __tablename__ = "tutorials"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(160), nullable=False)
    description = db.Column(db.Text, nullable=True)
    sport_category = db.Column(db.String(50), nullable=False, index=True)
    difficulty = db.Column(db.String(20), nullable=False)  # beginner .. expert
    instructor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    video_url = db.Column(db.String(500), nullable=True)
    thumbnail = db.Column(db.String(500), nullable=True)
    duration = db.Column(db.Integer, nullable=True)  # minutes
    is_premium = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class TutorialLesson(db.Model):
    __tablename__ = "tutorial_lessons"

    id = db.Column(db.Integer, primary_key=True)
    tutorial_id = db.Column(db.Integer, db.ForeignKey("tutorials.id"), nullable=False, index=True)
    title = db.Column(db.String(160), nullable=False)
    description = db.Column(db.Text, nullable=True)
    video_url = db.Column(db.String(500), nullable=True)
    duration = db.Column(db.Integer, nullable=True)
    sequence_order = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("tutorial_id", "sequence_order", name="uq_lesson_sequence"),
    )


class UserTutorialProgress(db.Model):
    __tablename__ = "user_tutorial_progress"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    tutorial_id = db.Column(db.Integer, db.ForeignKey("tutorials.id"), nullable=False, index=True)
    current_lesson_id = db.Column(db.Integer, db.ForeignKey("tutorial_lessons.id"), nullable=True)

    # not_started, in_progress, completed
    progress = db.Column(db.String(20), nullable=False, default="not_started")
    completed_lessons = db.Column(db.Integer, nullable=False, default=0)
    total_lessons = db.Column(db.Integer, nullable=False, default=0)

    last_accessed = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    completion_date = db.Column(db.DateTime, nullable=True)
    certificate_issued = db.Column(db.Boolean, default=False, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("user_id", "tutorial_id", name="uq_progress_user_tutorial"),
    )
