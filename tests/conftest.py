import pytest
from fastapi.testclient import TestClient

from linkblog.api.deps import get_metadata_service
from linkblog.config import Settings
from linkblog.main import create_app
from linkblog.schemas import LinkMetadata


class FakeMetadataService:
    """Records requested URLs and answers from a fixed table."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.results: dict[str, LinkMetadata] = {}

    async def extract(self, url: str) -> LinkMetadata:
        self.calls.append(url)
        return self.results.get(url, LinkMetadata())


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'links.db'}",
        _env_file=None,
    )


@pytest.fixture
def metadata_service():
    return FakeMetadataService()


@pytest.fixture
def app(settings, metadata_service):
    app = create_app(settings)
    app.dependency_overrides[get_metadata_service] = lambda: metadata_service
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def create_link(client):
    def _create(url="https://ex.com", commentary="hi", **kwargs):
        response = client.post(
            "/api/links", data={"url": url, "commentary": commentary}, **kwargs
        )
        assert response.status_code == 200, response.text
        return response

    return _create
