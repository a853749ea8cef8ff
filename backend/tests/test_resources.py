from mcq_service import resources
from mcq_service.gemini_client import GeminiClient
from mcq_service.generation import is_generation_enabled
from mcq_service.settings import settings


def test_no_generator_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", None)
    assert not is_generation_enabled()
    assert resources.get_generator_factory() is None


def test_generator_factory_when_key_configured(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", "test-key")
    assert is_generation_enabled()
    assert resources.get_generator_factory() is GeminiClient
