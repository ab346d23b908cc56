"""SQLAlchemy models for all database tables."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    TIMESTAMP,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from documents_view.core.database import Base


class DocumentStatus:
    """Document lifecycle states stored in ``documents.status``."""

    UNPROCESSED = "unprocessed"
    PROCESSED = "processed"
    TRASHED = "trashed"


class User(Base):
    """Back-office user who can be assigned documents and performs actions."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


class UserGroup(Base):
    """Group of users that documents can be assigned to."""

    __tablename__ = "user_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Producer(Base):
    """Agency or broker that writes policies."""

    __tablename__ = "producers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    number: Mapped[str] = mapped_column(String, unique=True, nullable=False)  # e.g. AG-789456
    name: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    policies: Mapped[list["Policy"]] = relationship(
        "Policy", secondary="map_producer_policy", back_populates="producers"
    )

    @property
    def display_name(self) -> str:
        return self.number


class Policy(Base):
    """Insurance policy identified by prefix and number (e.g. PLCY-12345)."""

    __tablename__ = "policies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prefix: Mapped[str] = mapped_column(String, nullable=False)
    number: Mapped[str] = mapped_column(String, nullable=False)
    effective_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiration_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    producers: Mapped[list["Producer"]] = relationship(
        "Producer", secondary="map_producer_policy", back_populates="policies"
    )
    losses: Mapped[list["Loss"]] = relationship(
        "Loss", secondary="map_policy_loss", back_populates="policies"
    )

    @property
    def formatted_number(self) -> str:
        return f"{self.prefix}-{self.number}"


class Loss(Base):
    """Loss event reported against one or more policies."""

    __tablename__ = "losses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    loss_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    policies: Mapped[list["Policy"]] = relationship(
        "Policy", secondary="map_policy_loss", back_populates="losses"
    )
    claimants: Mapped[list["Claimant"]] = relationship(
        "Claimant", secondary="map_loss_claimant", back_populates="losses"
    )

    @property
    def display_name(self) -> str:
        return f"{self.sequence} - {self.name}"


class Claimant(Base):
    """Party claiming against a loss."""

    __tablename__ = "claimants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    losses: Mapped[list["Loss"]] = relationship(
        "Loss", secondary="map_loss_claimant", back_populates="claimants"
    )

    @property
    def display_name(self) -> str:
        return f"{self.sequence} - {self.name}"


class MapProducerPolicy(Base):
    """Producer to policy association."""

    __tablename__ = "map_producer_policy"

    producer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("producers.id", ondelete="CASCADE"), primary_key=True
    )
    policy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), primary_key=True
    )


class MapPolicyLoss(Base):
    """Policy to loss association; a loss may only be linked through this table."""

    __tablename__ = "map_policy_loss"

    policy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), primary_key=True
    )
    loss_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("losses.id", ondelete="CASCADE"), primary_key=True
    )


class MapLossClaimant(Base):
    """Loss to claimant association."""

    __tablename__ = "map_loss_claimant"

    loss_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("losses.id", ondelete="CASCADE"), primary_key=True
    )
    claimant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("claimants.id", ondelete="CASCADE"), primary_key=True
    )


class Document(Base):
    """Claims document with its metadata links."""

    __tablename__ = "documents"
    __table_args__ = (
        CheckConstraint(
            "assigned_user_id IS NULL OR assigned_group_id IS NULL",
            name="ck_documents_single_assignee",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    filename: Mapped[str] = mapped_column(String, nullable=False)
    file_path: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=DocumentStatus.UNPROCESSED
    )  # unprocessed | processed | trashed

    policy_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("policies.id"), nullable=True
    )
    loss_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("losses.id"), nullable=True
    )
    claimant_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("claimants.id"), nullable=True
    )
    producer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("producers.id"), nullable=True
    )
    assigned_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    assigned_group_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("user_groups.id"), nullable=True
    )

    created_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    updated_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=datetime.utcnow
    )
    trashed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )

    # Relationships
    policy: Mapped[Optional["Policy"]] = relationship("Policy")
    loss: Mapped[Optional["Loss"]] = relationship("Loss")
    claimant: Mapped[Optional["Claimant"]] = relationship("Claimant")
    producer: Mapped[Optional["Producer"]] = relationship("Producer")
    assigned_user: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[assigned_user_id]
    )
    assigned_group: Mapped[Optional["UserGroup"]] = relationship("UserGroup")
    created_by: Mapped[Optional["User"]] = relationship("User", foreign_keys=[created_by_id])
    updated_by: Mapped[Optional["User"]] = relationship("User", foreign_keys=[updated_by_id])
    actions: Mapped[list["DocumentAction"]] = relationship(
        "DocumentAction", back_populates="document", cascade="all, delete-orphan"
    )

    @property
    def is_processed(self) -> bool:
        return self.status == DocumentStatus.PROCESSED

    @property
    def is_trashed(self) -> bool:
        return self.status == DocumentStatus.TRASHED


class DocumentAction(Base):
    """Audit trail entry for a document."""

    __tablename__ = "document_actions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    action_type: Mapped[str] = mapped_column(
        String, nullable=False
    )  # view | edit | process | unprocess | trash | restore
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", nullable=False
    )

    document: Mapped["Document"] = relationship("Document", back_populates="actions")
    user: Mapped[Optional["User"]] = relationship("User")
