from __future__ import annotations

import enum

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class ExchangeStatus(str, enum.Enum):
    DRAFT = "draft"
    INVITING = "inviting"
    ACTIVE = "active"
    COMPLETED = "completed"


class ParticipantStatus(str, enum.Enum):
    INVITED = "invited"
    ACCEPTED = "accepted"
    DECLINED = "declined"


def _enum_values(enum_cls) -> list:
    return [member.value for member in enum_cls]


class GiftExchange(Base):
    __tablename__ = "gift_exchanges"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    owner_email = Column(String, nullable=True)
    status = Column(
        Enum(ExchangeStatus, name="exchange_status", values_callable=_enum_values),
        nullable=False,
        default=ExchangeStatus.DRAFT,
        server_default=ExchangeStatus.DRAFT.value,
    )
    budget_min = Column(Integer, nullable=True)
    budget_max = Column(Integer, nullable=True)
    match_seed = Column(Integer, nullable=True)
    matched_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    participants = relationship(
        "ExchangeParticipant",
        back_populates="exchange",
        cascade="all, delete-orphan",
        order_by="ExchangeParticipant.id",
    )
    exclusions = relationship(
        "ExchangeExclusion",
        back_populates="exchange",
        cascade="all, delete-orphan",
        order_by="ExchangeExclusion.id",
    )

    def __repr__(self) -> str:
        return f"<GiftExchange(id={self.id}, name={self.name}, status={self.status})>"


class ExchangeParticipant(Base):
    __tablename__ = "exchange_participants"

    id = Column(Integer, primary_key=True)
    gift_exchange_id = Column(
        Integer, ForeignKey("gift_exchanges.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    status = Column(
        Enum(ParticipantStatus, name="participant_status", values_callable=_enum_values),
        nullable=False,
        default=ParticipantStatus.INVITED,
        server_default=ParticipantStatus.INVITED.value,
    )
    matched_participant_id = Column(
        Integer, ForeignKey("exchange_participants.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    exchange = relationship("GiftExchange", back_populates="participants")
    matched_participant = relationship("ExchangeParticipant", remote_side=[id])

    __table_args__ = (
        UniqueConstraint("gift_exchange_id", "email", name="uq_exchange_participants_exchange_email"),
    )

    def __repr__(self) -> str:
        return (
            "<ExchangeParticipant(id={0}, exchange_id={1}, email={2}, status={3})>"
        ).format(self.id, self.gift_exchange_id, self.email, self.status)


class ExchangeExclusion(Base):
    __tablename__ = "exchange_exclusions"

    id = Column(Integer, primary_key=True)
    gift_exchange_id = Column(
        Integer, ForeignKey("gift_exchanges.id", ondelete="CASCADE"), nullable=False, index=True
    )
    participant_a_id = Column(
        Integer, ForeignKey("exchange_participants.id", ondelete="CASCADE"), nullable=False
    )
    participant_b_id = Column(
        Integer, ForeignKey("exchange_participants.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    exchange = relationship("GiftExchange", back_populates="exclusions")
    participant_a = relationship("ExchangeParticipant", foreign_keys=[participant_a_id])
    participant_b = relationship("ExchangeParticipant", foreign_keys=[participant_b_id])

    __table_args__ = (
        UniqueConstraint(
            "gift_exchange_id",
            "participant_a_id",
            "participant_b_id",
            name="uq_exchange_exclusions_pair",
        ),
    )
