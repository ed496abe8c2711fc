"""
API tests using FastAPI's TestClient with the service singletons replaced.
"""
import pytest
from fastapi.testclient import TestClient

from govrelay.bot.message_handler import MessageHandler
from govrelay.config import common_settings as settings
from govrelay.directory.dao_directory import DaoDirectory
from govrelay.main import app
from govrelay.orchestrator.orchestrator import ProposalOrchestrator
from govrelay.orchestrator.tests.fakes import FakeExecutor, FakeOracle, FakeReporter, RecordingNotifier
from govrelay.routers import deps

TOKEN = "test-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


class FakeSubgraph:
    def __init__(self, dao):
        self.dao = dao

    async def query_dao_by_name(self, name):
        return self.dao if name == self.dao.name else None


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(monkeypatch, dao, notifier):
    monkeypatch.setattr(settings, "REQUIRED_API_KEY", TOKEN)

    directory = DaoDirectory()
    orchestrator = ProposalOrchestrator(
        oracle=FakeOracle(),
        reporter=FakeReporter(),
        executor=FakeExecutor(),
        notifier=notifier,
    )
    handler = MessageHandler(
        directory=directory,
        subgraph=FakeSubgraph(dao),
        orchestrator=orchestrator,
        notifier=notifier,
        monitor_invites=[],
    )
    monkeypatch.setattr(deps, "_directory", directory)
    monkeypatch.setattr(deps, "_notifier", notifier)
    monkeypatch.setattr(deps, "_orchestrator", orchestrator)
    monkeypatch.setattr(deps, "_message_handler", handler)

    with TestClient(app) as test_client:
        yield test_client


def chat(content, message_id="m-1", **kwargs) -> dict:
    body = {"content": content, "message_id": message_id, "channel_id": "c-1", "guild_id": "g-1"}
    body.update(kwargs)
    return body


class TestAuth:

    def test_missing_token(self, client):
        response = client.post("/v1/messages", json=chat("!new"))

        assert response.status_code == 401

    def test_wrong_token(self, client):
        response = client.post("/v1/messages", json=chat("!new"), headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json()["detail"]["error"]["message"] == "Incorrect API key provided."

    def test_unconfigured_server(self, client, monkeypatch):
        monkeypatch.setattr(settings, "REQUIRED_API_KEY", None)

        response = client.post("/v1/messages", json=chat("!new"), headers=AUTH)

        assert response.status_code == 500


class TestMessages:

    def test_setup_then_proposal(self, client, notifier):
        setup = client.post("/v1/messages", json=chat("!setup witnet-dao", author_is_admin=True), headers=AUTH)

        assert setup.status_code == 200
        assert setup.json()["handled"] is True

        daos = client.get("/v1/daos").json()["bindings"]
        assert daos == [{
            "guild_id": "g-1",
            "dao_name": "witnet-dao",
            "queue": "0x1111111111111111111111111111111111111111",
            "executor": "0x4444444444444444444444444444444444444444",
        }]

        proposal = client.post(
            "/v1/messages",
            json=chat("!proposal [12 31 2099 23:59:59] [Fund it]", message_id="m-2"),
            headers=AUTH,
        )

        assert proposal.status_code == 200
        assert proposal.json()["accepted"] is True
        assert notifier.texts[-1] == proposal.json()["reply"]

        run = client.get("/v1/proposals/m-2").json()
        assert run["stage"] == "scheduled"
        assert run["dao_name"] == "witnet-dao"
        assert [item["message_id"] for item in client.get("/v1/proposals").json()] == ["m-2"]

    def test_validation_errors_are_replies(self, client):
        response = client.post("/v1/messages", json=chat("!proposal [12 31 2099 23:59:59] [x]"), headers=AUTH)

        body = response.json()
        assert response.status_code == 200
        assert body["handled"] is True
        assert body["accepted"] is False
        assert body["reply"].startswith("Sorry, this DAO isn't connected")

    def test_unrelated_message(self, client):
        response = client.post("/v1/messages", json=chat("hello"), headers=AUTH)

        assert response.json() == {"handled": False, "accepted": False, "reply": None}


def test_unknown_proposal_is_404(client):
    assert client.get("/v1/proposals/missing").status_code == 404


def test_healthz_reports_counts(client, monkeypatch):
    for var in ("GOVRELAY_TOKEN", "WITNET_NODE_URL", "ETHEREUM_RPC_URL", "CHAT_REPLY_WEBHOOK_URL"):
        monkeypatch.setenv(var, "set")

    body = client.get("/healthz").json()

    assert body["status"] == "ok"
    assert body["config"] == "ok"
    assert body["proposals_in_flight"] == 0
    assert body["daos_bound"] == 0
