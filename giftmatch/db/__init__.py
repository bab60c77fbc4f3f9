from giftmatch.db.models import (
    Base,
    ExchangeExclusion,
    ExchangeParticipant,
    ExchangeStatus,
    GiftExchange,
    ParticipantStatus,
)
from giftmatch.db.session import SessionLocal, get_session, init_engine

__all__ = [
    "Base",
    "ExchangeExclusion",
    "ExchangeParticipant",
    "ExchangeStatus",
    "GiftExchange",
    "ParticipantStatus",
    "SessionLocal",
    "get_session",
    "init_engine",
]
