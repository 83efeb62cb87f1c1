# simple_reviews/storage.py
"""
Post and metadata storage backed by SQLAlchemy.
Plays the role of the host's content store: posts of any registered type
plus an open-ended key/value metadata bag per post.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .security import log_event, utc_now

Base = declarative_base()


# ============================================================================
# MODELS
# ============================================================================

class Post(Base):
    """A content record of some registered post type"""
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_type = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    status = Column(String(32), nullable=False, default="publish")
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)

    def __repr__(self):
        return f"<Post(id={self.id}, post_type={self.post_type}, title={self.title!r})>"


class PostMeta(Base):
    """Metadata entry attached to a post"""
    __tablename__ = "postmeta"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    meta_key = Column(String(255), nullable=False, index=True)
    meta_value = Column(Text, nullable=True)


# ============================================================================
# STORE
# ============================================================================

class ReviewStore:
    """Query-by-type/date/id store with per-post metadata"""

    def __init__(self, database_url: str):
        self.database_url = database_url
        if database_url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection so every session sees the same in-memory db
                self.engine = create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
            else:
                self.engine = create_engine(database_url, connect_args=connect_args)
        else:
            self.engine = create_engine(database_url)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    def create_schema(self):
        Base.metadata.create_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()

    # ------------------------------------------------------------------
    # posts
    # ------------------------------------------------------------------

    def insert_post(
        self,
        post_type: str,
        title: str,
        content: str = "",
        meta: Optional[Dict[str, str]] = None,
        created_at: Optional[datetime] = None,
        status: str = "publish",
    ) -> Post:
        """Create a post and, optionally, its metadata entries"""
        with self.SessionLocal() as session:
            post = Post(
                post_type=post_type,
                title=title,
                content=content or "",
                status=status,
                created_at=created_at or utc_now(),
            )
            session.add(post)
            session.flush()
            for key, value in (meta or {}).items():
                session.add(PostMeta(post_id=post.id, meta_key=key, meta_value=_to_meta_value(value)))
            session.commit()

        log_event("post_created", {"post_id": post.id, "post_type": post_type, "severity": "debug"})
        return post

    def get_post(self, post_id: int) -> Optional[Post]:
        with self.SessionLocal() as session:
            return session.get(Post, post_id)

    def delete_post(self, post_id: int) -> bool:
        """Delete a post together with its metadata"""
        with self.SessionLocal() as session:
            post = session.get(Post, post_id)
            if post is None:
                return False
            session.query(PostMeta).filter(PostMeta.post_id == post_id).delete()
            session.delete(post)
            session.commit()
        return True

    def get_posts(
        self,
        post_type: Optional[str] = None,
        limit: Optional[int] = None,
        ids: Optional[Iterable[int]] = None,
    ) -> List[Post]:
        """
        Fetch published posts.

        Without ids: newest first (created_at DESC, then id DESC).
        With ids: only those posts, in the store's native id order; the
        order of the given ids is not kept.
        """
        stmt = select(Post).where(Post.status == "publish")
        if post_type is not None:
            stmt = stmt.where(Post.post_type == post_type)

        if ids is not None:
            stmt = stmt.where(Post.id.in_(list(ids))).order_by(Post.id.asc())
        else:
            stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc())

        if limit is not None:
            stmt = stmt.limit(limit)

        with self.SessionLocal() as session:
            return list(session.scalars(stmt))

    # ------------------------------------------------------------------
    # metadata
    # ------------------------------------------------------------------

    def get_post_meta(self, post_id: int, key: str) -> Optional[str]:
        """Return the first value stored under key, or None"""
        stmt = (
            select(PostMeta.meta_value)
            .where(PostMeta.post_id == post_id, PostMeta.meta_key == key)
            .order_by(PostMeta.id.asc())
            .limit(1)
        )
        with self.SessionLocal() as session:
            return session.scalars(stmt).first()

    def get_all_post_meta(self, post_id: int) -> Dict[str, Optional[str]]:
        stmt = select(PostMeta).where(PostMeta.post_id == post_id).order_by(PostMeta.id.asc())
        meta = {}
        with self.SessionLocal() as session:
            for row in session.scalars(stmt):
                meta.setdefault(row.meta_key, row.meta_value)
        return meta

    def update_post_meta(self, post_id: int, key: str, value) -> None:
        """Insert or replace the value stored under key"""
        with self.SessionLocal() as session:
            row = (
                session.query(PostMeta)
                .filter(PostMeta.post_id == post_id, PostMeta.meta_key == key)
                .order_by(PostMeta.id.asc())
                .first()
            )
            if row is None:
                session.add(PostMeta(post_id=post_id, meta_key=key, meta_value=_to_meta_value(value)))
            else:
                row.meta_value = _to_meta_value(value)
            session.commit()

    def delete_post_meta(self, post_id: int, key: str) -> int:
        with self.SessionLocal() as session:
            deleted = (
                session.query(PostMeta)
                .filter(PostMeta.post_id == post_id, PostMeta.meta_key == key)
                .delete()
            )
            session.commit()
        return deleted


def _to_meta_value(value) -> Optional[str]:
    if value is None:
        return None
    return str(value)
