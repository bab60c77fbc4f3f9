import pytest

from giftmatch.db import get_session, init_engine, repo
from giftmatch.db.models import Base
from giftmatch.services import exchange_flow


def test_get_session_rolls_back_on_error(tmp_path):
    engine = init_engine(f"sqlite+pysqlite:///{tmp_path / 'session.db'}")
    Base.metadata.create_all(engine)

    with pytest.raises(exchange_flow.ExchangeError):
        with get_session() as session:
            exchange_flow.create_exchange(session, "Kept out")
            exchange_flow.create_exchange(session, "Broken", budget_min=5, budget_max=1)

    with get_session() as session:
        assert repo.get_exchange_by_id(session, 1) is None


def test_get_session_commits(tmp_path):
    engine = init_engine(f"sqlite+pysqlite:///{tmp_path / 'session.db'}")
    Base.metadata.create_all(engine)

    with get_session() as session:
        exchange_id = exchange_flow.create_exchange(session, "Kept").id

    with get_session() as session:
        assert repo.get_exchange_by_id(session, exchange_id).name == "Kept"
