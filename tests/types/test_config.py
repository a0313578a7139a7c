"""Unit tests for payflow.types.config module."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from payflow.types.config import FlowConfig


class TestFlowConfig:
    """Test FlowConfig defaults, validation and env loading."""

    def test_defaults(self):
        config = FlowConfig()
        assert config.invoice_fee == Decimal("9.00")
        assert config.currency == "BRL"
        assert config.locale == "en"
        assert config.setup_timeout_seconds == 120
        assert config.challenge_timeout_seconds == 300
        assert config.success_delay_seconds == 1.5
        assert config.gateway_publishable_key is None

    def test_timeouts_must_be_positive(self):
        with pytest.raises(ValidationError):
            FlowConfig(challenge_timeout_seconds=0)
        with pytest.raises(ValidationError):
            FlowConfig(setup_timeout_seconds=-1)
        with pytest.raises(ValidationError):
            FlowConfig(success_delay_seconds=-0.5)

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PAYFLOW_API_BASE_URL", "https://api.example.com/api")
        monkeypatch.setenv("PAYFLOW_INVOICE_FEE", "12.50")
        monkeypatch.setenv("PAYFLOW_LOCALE", "pt-BR")
        monkeypatch.setenv("PAYFLOW_API_TOKEN", "")

        config = FlowConfig.from_env()

        assert config.api_base_url == "https://api.example.com/api"
        assert config.invoice_fee == Decimal("12.50")
        assert config.locale == "pt-BR"
        assert config.api_token is None

    def test_from_env_overrides_win(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PAYFLOW_LOCALE", "pt-BR")

        config = FlowConfig.from_env(locale="en", success_delay_seconds=0)

        assert config.locale == "en"
        assert config.success_delay_seconds == 0

    def test_from_env_reads_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        # Registered with monkeypatch so the value loaded from .env is undone.
        monkeypatch.setenv("PAYFLOW_GATEWAY_PUBLISHABLE_KEY", "unset")
        monkeypatch.delenv("PAYFLOW_GATEWAY_PUBLISHABLE_KEY")
        (tmp_path / ".env").write_text("PAYFLOW_GATEWAY_PUBLISHABLE_KEY=pk_test_dotenv\n")

        config = FlowConfig.from_env()

        assert config.gateway_publishable_key == "pk_test_dotenv"
