"""pytest 설정 및 fixtures."""
import pytest
from fastapi.testclient import TestClient

from core.config import get_settings
from fakes import FakeSources
from main import app
from services.alpha_service import get_alpha_service


@pytest.fixture(autouse=True)
def payments_disabled(monkeypatch):
    """기본은 결제 게이트 비활성화."""
    monkeypatch.setattr(get_settings(), "payments_receivable_address", "")


@pytest.fixture(scope="function")
def sources():
    return FakeSources()


@pytest.fixture(scope="function")
def client(sources):
    """가짜 소스가 주입된 테스트 클라이언트."""
    app.dependency_overrides[get_alpha_service] = sources.service

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
