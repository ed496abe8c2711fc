"""Shared pytest fixtures."""
import pytest

from govrelay.data_models.schemas import RegistryEntry
from govrelay.orchestrator.tests.fakes import FakeClock

DAO_PAYLOAD = {
    "name": "witnet-dao",
    "queue": {
        "address": "0x1111111111111111111111111111111111111111",
        "config": {
            "executionDelay": "30",
            "scheduleDeposit": {"token": "0x2222222222222222222222222222222222222222", "amount": "1000"},
            "challengeDeposit": {"token": "0x2222222222222222222222222222222222222222", "amount": "2000"},
            "resolver": "0x3333333333333333333333333333333333333333",
            "rules": "0x",
        },
    },
    "executor": {"address": "0x4444444444444444444444444444444444444444"},
}


@pytest.fixture
def dao_payload() -> dict:
    return DAO_PAYLOAD


@pytest.fixture
def dao() -> RegistryEntry:
    return RegistryEntry(**DAO_PAYLOAD)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
