"""Unit tests for APIServer."""

import httpx
import pytest

from slidestream.api.server import APIServer
from slidestream.jobs import JobSupervisor
from slidestream.schema import StartParams
from tests.fakes import ScriptedContentModel


@pytest.fixture
def content_model() -> ScriptedContentModel:
    """Keep started jobs running for the duration of a request."""
    return ScriptedContentModel(delay=5.0)


@pytest.mark.unit
class TestAPIServer:
    """Test cases for APIServer."""

    @pytest.fixture
    async def api_client(self, supervisor: JobSupervisor, registry):
        """Create an HTTP client bound to the ASGI app."""
        api_server = APIServer(supervisor, registry)
        transport = httpx.ASGITransport(app=api_server.app)
        async with httpx.AsyncClient(transport=transport, base_url="http://api.test") as client:
            yield client

    # ==================== Start Tests ====================

    @pytest.mark.asyncio
    async def test_start_with_topic(self, api_client, supervisor):
        """Test POST /slides with a topic."""
        response = await api_client.post("/slides", json={"topicText": "Rust ownership"})

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["streamAddress"] == f"ws://stream.test:8081/ws/slides?jobId={data['jobId']}"
        assert supervisor.get(data["jobId"]) is not None

    @pytest.mark.asyncio
    async def test_start_accepts_legacy_field_names(self, api_client, supervisor):
        """Test POST /slides with chatId."""
        response = await api_client.post("/slides", json={"chatId": "conv-1"})

        assert response.status_code == 200
        record = supervisor.get(response.json()["jobId"])
        assert record.params.conversation_id == "conv-1"

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"topicText": "   "},
            {"filePath": "/tmp/notes.md"},
        ],
    )
    @pytest.mark.asyncio
    async def test_start_without_source_is_rejected(self, api_client, supervisor, body):
        """Test POST /slides without a usable source."""
        response = await api_client.post("/slides", json=body)

        assert response.status_code == 400
        data = response.json()
        assert data["ok"] is False
        assert "conversationId or topicText" in data["error"]
        assert supervisor.active_count() == 0

    @pytest.mark.asyncio
    async def test_start_with_malformed_body(self, api_client):
        """Test POST /slides with a body that is not JSON."""
        response = await api_client.post(
            "/slides", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["ok"] is False

    @pytest.mark.asyncio
    async def test_start_over_capacity(self, api_client, supervisor, test_settings):
        """Test POST /slides when the job limit is reached."""
        test_settings.max_active_jobs = 1
        first = await api_client.post("/slides", json={"topicText": "first"})
        second = await api_client.post("/slides", json={"topicText": "second"})

        assert first.status_code == 200
        assert second.status_code == 503
        assert second.json()["ok"] is False

    # ==================== Inspection Tests ====================

    @pytest.mark.asyncio
    async def test_get_job(self, api_client, supervisor):
        """Test GET /slides/{job_id}."""
        result = supervisor.start(StartParams(topic_text="Rust ownership"))

        response = await api_client.get(f"/slides/{result.job_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["jobId"] == result.job_id
        assert data["state"] in {"created", "content_ready", "planning"}
        assert data["topicText"] == "Rust ownership"
        assert "conversationId" not in data

    @pytest.mark.asyncio
    async def test_get_unknown_job(self, api_client):
        """Test GET /slides/{job_id} for an unknown job."""
        response = await api_client.get("/slides/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"ok": False, "error": "Job not found"}

    @pytest.mark.asyncio
    async def test_health(self, api_client, supervisor):
        """Test GET /health."""
        supervisor.start(StartParams(topic_text="Rust ownership"))

        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "activeJobs": 1, "openChannels": 0}
