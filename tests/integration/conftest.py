"""Integration test fixtures for Case Register.

Provides an async HTTP client bound to a fresh FastAPI app whose
transcription service is swapped for one built from mock providers and
test settings.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from caseregister.api.app import create_app
from caseregister.api.routes.transcription import get_transcription_service
from caseregister.services.transcription.pipeline import TranscriptionService


@pytest.fixture
def app():
    """Create a fresh FastAPI application instance."""
    return create_app()


@pytest.fixture
def service(mock_recognizer, mock_converter, settings):
    """Pipeline wired to the mock recognizer and converter."""
    return TranscriptionService(
        recognizer=mock_recognizer, converter=mock_converter, settings=settings
    )


@pytest.fixture
async def async_client(app, service):
    """AsyncClient whose requests reach ``service`` through the real router."""
    app.dependency_overrides[get_transcription_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
