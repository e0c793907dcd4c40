from __future__ import annotations

from sqlalchemy import Boolean, Index, Integer, String, Text, false, text
from sqlalchemy.orm import Mapped, mapped_column

from messaging_service.domain.entities.message import MAX_FIELD_LENGTH
from messaging_service.infrastructure.db.base import Base


class MessageModel(Base):
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    to: Mapped[str] = mapped_column(String(MAX_FIELD_LENGTH), nullable=False)
    sender: Mapped[str] = mapped_column(String(MAX_FIELD_LENGTH), nullable=False)
    subject: Mapped[str] = mapped_column(
        String(MAX_FIELD_LENGTH), nullable=False, default="", server_default=text("''"),
    )
    body: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=text("''"),
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )
    # Plain column, no FK: the subtree cascade is handled by the message service.
    parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_messages_parent_id", "parent_id"),
        Index("ix_messages_to_parent", "to", "parent_id"),
    )
