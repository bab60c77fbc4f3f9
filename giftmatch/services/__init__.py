from giftmatch.services.exchange_flow import ExchangeError
from giftmatch.services.matching import (
    InfeasibleMatchError,
    MatchingError,
    MatchNotFoundError,
    PreconditionError,
    generate_assignment,
)

__all__ = [
    "ExchangeError",
    "InfeasibleMatchError",
    "MatchingError",
    "MatchNotFoundError",
    "PreconditionError",
    "generate_assignment",
]
