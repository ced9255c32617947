"""Sample models used by the audit tests."""

from typing import Any, ClassVar

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text, func
from sqlalchemy.orm import Mapped, column_property, mapped_column, relationship

from auditable.core.database.base import AuditMixin, Base, TimestampMixin


post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", ForeignKey("posts.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)

post_reviewers = Table(
    "post_reviewers",
    Base.metadata,
    Column("post_id", ForeignKey("posts.id"), primary_key=True),
    Column("author_id", ForeignKey("authors.id"), primary_key=True),
)


class Tag(Base):
    """Plain lookup model, not audited itself."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    label: Mapped[str] = mapped_column(String(50))


class Author(Base, AuditMixin):
    """Audited model referenced by posts."""

    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))


class Post(Base, TimestampMixin, AuditMixin):
    """Audited model with many-to-many tags and a computed column."""

    __tablename__ = "posts"
    __audit_ignore__ = ("view_count",)
    # author is many-to-one, so it is dropped from tracking
    __audit_habtm__ = ("author",)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255))
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    author_id: Mapped[int | None] = mapped_column(ForeignKey("authors.id"), nullable=True)
    title_length: Mapped[int] = column_property(func.length(title))

    author: Mapped[Author | None] = relationship()
    tags: Mapped[list[Tag]] = relationship(secondary=post_tags)
    # reviewers point at an audited model, so they are dropped from tracking
    reviewers: Mapped[list[Author]] = relationship(secondary=post_reviewers)


class Person(Base, AuditMixin):
    """Audited model with no relationships."""

    __tablename__ = "people"
    __audit_ignore__ = ("age",)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)


class Ledger(Base, AuditMixin):
    """Audited model that implements every optional audit hook."""

    __tablename__ = "ledgers"

    calls: ClassVar[list[tuple[Any, ...]]] = []

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    balance: Mapped[int] = mapped_column(Integer, default=0)

    @classmethod
    def current_user(cls) -> dict[str, Any]:
        return {"id": 7, "description": "billing-job"}

    @classmethod
    def after_audit_create(cls, entity_id, header_id) -> None:
        cls.calls.append(("create", entity_id, header_id))

    @classmethod
    def after_audit_update(cls, entity_id, original, deltas, header_id) -> None:
        cls.calls.append(("update", entity_id, dict(original), list(deltas), header_id))

    @classmethod
    def after_audit_property(cls, entity_id, field, old_value, new_value) -> None:
        cls.calls.append(("property", entity_id, field, old_value, new_value))
