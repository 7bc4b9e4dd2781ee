from __future__ import annotations

from ..extensions import db
from .catalog import SoftDeleteMixin
from merrily.time_utils import to_utc_z


class Post(SoftDeleteMixin, db.Model):
    __tablename__ = "posts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=True)
    content = db.Column(db.Text, nullable=True)
    images = db.Column(db.JSON, nullable=True)  # list of public URLs

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    author = db.relationship(
        "UserProfile",
        primaryjoin="foreign(Post.user_id) == UserProfile.id",
        lazy="joined",
        viewonly=True,
    )
    likes = db.relationship("PostLike", back_populates="post", lazy=True)
    comments = db.relationship("Comment", back_populates="post", lazy=True)

    def preview(self) -> str:
        """Short label used in notification messages."""
        if self.title:
            return self.title
        if self.content:
            return self.content[:20]
        return "post"

    def to_dict(self, viewer_id: str | None = None) -> dict:
        visible_comments = [c for c in self.comments if c.deleted_at is None]
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "content": self.content,
            "images": list(self.images or []),
            "user_profile": self.author.to_public_dict() if self.author else None,
            "likes_count": len(self.likes),
            "is_liked": any(like.user_id == viewer_id for like in self.likes) if viewer_id else False,
            "comments_count": len(visible_comments),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Comment(SoftDeleteMixin, db.Model):
    __tablename__ = "comments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey("posts.id"), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    post = db.relationship("Post", back_populates="comments")
    author = db.relationship(
        "UserProfile",
        primaryjoin="foreign(Comment.user_id) == UserProfile.id",
        lazy="joined",
        viewonly=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "post_id": self.post_id,
            "user_id": self.user_id,
            "content": self.content,
            "user_profile": self.author.to_public_dict() if self.author else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class PostLike(db.Model):
    __tablename__ = "post_likes"
    __table_args__ = (
        db.UniqueConstraint("post_id", "user_id", name="uq_post_likes_post_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey("posts.id"), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    post = db.relationship("Post", back_populates="likes")
    author = db.relationship(
        "UserProfile",
        primaryjoin="foreign(PostLike.user_id) == UserProfile.id",
        lazy="joined",
        viewonly=True,
    )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "user_profile": self.author.to_public_dict() if self.author else None,
        }
