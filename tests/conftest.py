from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from powerdash.api import deps
from powerdash.core.config import Settings
from powerdash.factory import create_app
from tests.fakes import FakePowerMeterBackend, sample_backend


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        backend_base_url="http://backend.example.com:3000",
        backend_timeout_seconds=1.0,
        backend_user_agent="test-agent",
        log_level="WARNING",
        log_json=False,
        default_page_size=50,
    )


@pytest.fixture()
def backend() -> FakePowerMeterBackend:
    return sample_backend()


@pytest.fixture()
def client(settings: Settings, backend: FakePowerMeterBackend) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[deps.get_backend] = lambda: backend
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def this_year() -> int:
    return date.today().year
