"""
Modeles Communaute / Community models.
Post, reactions (like/dislike) et signalements / Post, reactions and reports.
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from motormate.database import Base

# Seuil de masquage automatique / Auto-hide threshold
REPORT_HIDE_THRESHOLD = 5


class ReactionKind(str, enum.Enum):
    """Type de reaction / Reaction kind."""
    LIKE = "like"
    DISLIKE = "dislike"


class ReportReason(str, enum.Enum):
    """Motif de signalement / Report reason."""
    UNRELATED_CONTENT = "unrelated_content"
    HATE_SPEECH = "hate_speech"
    VIOLENCE = "violence"
    ADULT_CONTENT = "adult_content"
    SPAM = "spam"
    OTHER = "other"


class Post(Base):
    """Publication du fil communautaire / Community feed post."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    images: Mapped[list] = mapped_column(JSON, default=list)
    likes_count: Mapped[int] = mapped_column(default=0)
    dislikes_count: Mapped[int] = mapped_column(default=0)
    reports_count: Mapped[int] = mapped_column(default=0)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=True)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Post {self.id} {self.title[:20]}>"


class PostReaction(Base):
    """Reaction d'un utilisateur, une seule par post / One reaction per user per post."""

    __tablename__ = "post_reactions"
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_post_reaction_user"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    kind: Mapped[ReactionKind] = mapped_column(Enum(ReactionKind), nullable=False)


class PostReport(Base):
    """Signalement d'un post / Post report."""

    __tablename__ = "post_reports"
    __table_args__ = (UniqueConstraint("post_id", "reported_by", name="uq_post_report_user"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    reported_by: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reason: Mapped[ReportReason] = mapped_column(Enum(ReportReason), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
