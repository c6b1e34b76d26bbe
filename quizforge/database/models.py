"""SQLAlchemy models for questions, the topic catalog, mastery and the answer log."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class QuestionRow(Base):
    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    text: Mapped[str] = mapped_column(Text)
    options: Mapped[list] = mapped_column(JSON)
    correct_answer: Mapped[str] = mapped_column(Text)
    difficulty: Mapped[float] = mapped_column(Float)
    subject: Mapped[str] = mapped_column(String(50), index=True)
    source: Mapped[str] = mapped_column(String(20))
    topic_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)


class TopicRow(Base):
    __tablename__ = "topics"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    slug: Mapped[str] = mapped_column(String(100), unique=True)
    subject: Mapped[str] = mapped_column(String(50), index=True)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text, default="")
    difficulty_level: Mapped[float] = mapped_column(Float)

    prerequisites: Mapped[list["TopicPrerequisiteRow"]] = relationship(
        foreign_keys="TopicPrerequisiteRow.topic_id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class TopicPrerequisiteRow(Base):
    __tablename__ = "topic_prerequisites"

    topic_id: Mapped[str] = mapped_column(ForeignKey("topics.id"), primary_key=True)
    prerequisite_id: Mapped[str] = mapped_column(ForeignKey("topics.id"), primary_key=True)


class MasteryRow(Base):
    __tablename__ = "user_topic_mastery"
    __table_args__ = (UniqueConstraint("user_id", "topic_id", name="uq_mastery_user_topic"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(100), index=True)
    # Not a foreign key: resolver-synthesised topics never reach the catalog table
    topic_id: Mapped[str] = mapped_column(String(64))
    questions_attempted: Mapped[int] = mapped_column(Integer, default=0)
    questions_correct: Mapped[int] = mapped_column(Integer, default=0)
    mastery_level: Mapped[float] = mapped_column(Float, default=0.0)
    consecutive_correct: Mapped[int] = mapped_column(Integer, default=0)
    confidence_level: Mapped[float] = mapped_column(Float, default=0.0)
    last_practiced: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    # Checked and bumped on every UPDATE; a stale version raises StaleDataError
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class AnswerRow(Base):
    __tablename__ = "user_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    user_id: Mapped[str] = mapped_column(String(100), index=True)
    question_id: Mapped[str] = mapped_column(String(36))
    topic_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_answer: Mapped[str] = mapped_column(Text)
    is_correct: Mapped[bool] = mapped_column(Boolean)
    confidence: Mapped[float] = mapped_column(Float)
    time_spent: Mapped[float] = mapped_column(Float)
    difficulty_before: Mapped[float] = mapped_column(Float)
    difficulty_after: Mapped[float] = mapped_column(Float)
    reward: Mapped[float] = mapped_column(Float)
    answered_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
