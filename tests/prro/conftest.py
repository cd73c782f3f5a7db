"""
Shared fixtures for the PRRO offline chain tests.
"""

from datetime import datetime, timezone

import pytest

from prro.config import OfflineConfig
from prro.documents import ShiftData, ShiftDocumentAssembler
from prro.offline import OfflineChainBuilder
from prro.time import FixedClock

SESSION_ID = "1234"
SEED = "987654321"
REGISTER_FISCAL_NUM = "4000012345"
LOCAL_REGISTER_NUM = "7"

START = datetime(2025, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


class FixedIdProvider:
    """Deterministic UIDs: doc-0001, doc-0002, ..."""

    def __init__(self, prefix: str = "doc"):
        self._prefix = prefix
        self._counter = 0

    def new_id(self) -> str:
        self._counter += 1
        return f"{self._prefix}-{self._counter:04d}"


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def id_provider():
    return FixedIdProvider()


@pytest.fixture
def offline_config():
    return OfflineConfig()


@pytest.fixture
def shift():
    return ShiftData(
        tin="34554362",
        org_name="ТОВ Тестова крамниця",
        tax_objects_name="Магазин №1",
        address="м. Київ, вул. Хрещатик, 1",
        order_num=1,
        num_local=LOCAL_REGISTER_NUM,
        num_fiscal=REGISTER_FISCAL_NUM,
        cashier="Іваненко І.І.",
    )


@pytest.fixture
def assembler(shift, clock, id_provider, offline_config):
    return ShiftDocumentAssembler(
        shift,
        clock=clock,
        id_provider=id_provider,
        config=offline_config,
    )


@pytest.fixture
def builder(assembler, clock, id_provider, offline_config):
    return OfflineChainBuilder(
        session_id=SESSION_ID,
        seed=SEED,
        register_fiscal_num=REGISTER_FISCAL_NUM,
        local_register_num=LOCAL_REGISTER_NUM,
        assembler=assembler,
        clock=clock,
        id_provider=id_provider,
        config=offline_config,
    )
