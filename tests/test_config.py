"""Tests for environment-driven settings."""

from sng_gateway.config import Settings


def test_defaults(monkeypatch):
    for name in ("MCP_BEARER_SECRET", "SNG_ALLOW_WRITES", "SNG_API_KEY", "PORT", "MCP_PATH"):
        monkeypatch.delenv(name, raising=False)
    
    settings = Settings(_env_file=None)
    
    assert settings.PORT == 8787
    assert settings.MCP_PATH == "/mcp"
    assert settings.SNG_ALLOW_WRITES is False
    assert settings.MCP_BEARER_SECRET == ""
    assert settings.DOWNSTREAM_TIMEOUT_SECONDS == 30.0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SNG_ALLOW_WRITES", "true")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("MCP_BEARER_SECRET", "s3cret")
    
    settings = Settings(_env_file=None)
    
    assert settings.SNG_ALLOW_WRITES is True
    assert settings.PORT == 9000
    assert settings.MCP_BEARER_SECRET == "s3cret"


def test_env_file(tmp_path, monkeypatch):
    monkeypatch.delenv("SNG_ORGANIZATION", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("SNG_ORGANIZATION=acme\nUNRELATED_SETTING=1\n")
    
    settings = Settings(_env_file=env_file)
    
    assert settings.SNG_ORGANIZATION == "acme"
