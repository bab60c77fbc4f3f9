from __future__ import annotations

import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, delete, func, or_, select

from giftmatch.db.models import (
    ExchangeExclusion,
    ExchangeParticipant,
    ExchangeStatus,
    GiftExchange,
    ParticipantStatus,
)


def get_exchange_by_id(session, exchange_id: int) -> Optional[GiftExchange]:
    return session.scalar(select(GiftExchange).where(GiftExchange.id == exchange_id))


def create_exchange(
    session,
    name: str,
    owner_email: Optional[str],
    budget_min: Optional[int],
    budget_max: Optional[int],
) -> GiftExchange:
    exchange = GiftExchange(
        name=name,
        owner_email=owner_email,
        budget_min=budget_min,
        budget_max=budget_max,
        status=ExchangeStatus.DRAFT,
    )
    session.add(exchange)
    session.flush()
    return exchange


def update_exchange_status(
    session,
    exchange: GiftExchange,
    status: ExchangeStatus,
    matched_at: Optional[datetime.datetime] = None,
) -> None:
    exchange.status = status
    if matched_at is not None:
        exchange.matched_at = matched_at


def update_exchange_match_seed(session, exchange: GiftExchange, seed: Optional[int]) -> None:
    exchange.match_seed = seed


def get_participant_by_id(session, participant_id: int) -> Optional[ExchangeParticipant]:
    return session.scalar(select(ExchangeParticipant).where(ExchangeParticipant.id == participant_id))


def get_participant_by_email(session, exchange_id: int, email: str) -> Optional[ExchangeParticipant]:
    return session.scalar(
        select(ExchangeParticipant).where(
            and_(
                ExchangeParticipant.gift_exchange_id == exchange_id,
                func.lower(ExchangeParticipant.email) == email.lower(),
            )
        )
    )


def add_participant(session, exchange_id: int, name: str, email: str) -> ExchangeParticipant:
    participant = ExchangeParticipant(
        gift_exchange_id=exchange_id,
        name=name,
        email=email,
        status=ParticipantStatus.INVITED,
    )
    session.add(participant)
    session.flush()
    return participant


def update_participant_status(session, participant: ExchangeParticipant, status: ParticipantStatus) -> None:
    participant.status = status


def list_participants(session, exchange_id: int) -> List[ExchangeParticipant]:
    return list(
        session.scalars(
            select(ExchangeParticipant)
            .where(ExchangeParticipant.gift_exchange_id == exchange_id)
            .order_by(ExchangeParticipant.id)
        ).all()
    )


def list_accepted_participants(session, exchange_id: int) -> List[ExchangeParticipant]:
    return list(
        session.scalars(
            select(ExchangeParticipant)
            .where(
                and_(
                    ExchangeParticipant.gift_exchange_id == exchange_id,
                    ExchangeParticipant.status == ParticipantStatus.ACCEPTED,
                )
            )
            .order_by(ExchangeParticipant.id)
        ).all()
    )


def count_unaccepted_participants(session, exchange_id: int) -> int:
    return session.scalar(
        select(func.count())
        .select_from(ExchangeParticipant)
        .where(
            and_(
                ExchangeParticipant.gift_exchange_id == exchange_id,
                ExchangeParticipant.status != ParticipantStatus.ACCEPTED,
            )
        )
    )


def exclusion_exists(session, exchange_id: int, participant_a_id: int, participant_b_id: int) -> bool:
    return session.scalar(
        select(func.count())
        .select_from(ExchangeExclusion)
        .where(
            and_(
                ExchangeExclusion.gift_exchange_id == exchange_id,
                or_(
                    and_(
                        ExchangeExclusion.participant_a_id == participant_a_id,
                        ExchangeExclusion.participant_b_id == participant_b_id,
                    ),
                    and_(
                        ExchangeExclusion.participant_a_id == participant_b_id,
                        ExchangeExclusion.participant_b_id == participant_a_id,
                    ),
                ),
            )
        )
    ) > 0


def create_exclusion(
    session, exchange_id: int, participant_a_id: int, participant_b_id: int
) -> ExchangeExclusion:
    exclusion = ExchangeExclusion(
        gift_exchange_id=exchange_id,
        participant_a_id=participant_a_id,
        participant_b_id=participant_b_id,
    )
    session.add(exclusion)
    session.flush()
    return exclusion


def delete_exclusion(session, exchange_id: int, exclusion_id: int) -> int:
    result = session.execute(
        delete(ExchangeExclusion).where(
            and_(
                ExchangeExclusion.gift_exchange_id == exchange_id,
                ExchangeExclusion.id == exclusion_id,
            )
        )
    )
    return result.rowcount or 0


def list_exclusion_pairs(session, exchange_id: int) -> List[Tuple[int, int]]:
    rows = session.execute(
        select(ExchangeExclusion.participant_a_id, ExchangeExclusion.participant_b_id)
        .where(ExchangeExclusion.gift_exchange_id == exchange_id)
        .order_by(ExchangeExclusion.id)
    ).all()
    return [(row[0], row[1]) for row in rows]


def set_matches(session, participants: List[ExchangeParticipant], matches: Dict[int, int]) -> None:
    for participant in participants:
        participant.matched_participant_id = matches[participant.id]
    session.flush()
