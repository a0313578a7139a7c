"""Unit tests for payflow.types.errors module."""

import pytest
from payflow.types.errors import (
    PayflowError,
    ConfigError,
    StateError,
    BackendError,
    BackendUnavailableError,
    GatewayTransportError
)


class TestErrorHierarchy:
    """Test error class hierarchy."""

    def test_base_error(self):
        error = PayflowError("Test error")
        assert str(error) == "Test error"
        assert isinstance(error, Exception)

    def test_error_inheritance(self):
        for error_class in (ConfigError, StateError, BackendError, BackendUnavailableError, GatewayTransportError):
            assert issubclass(error_class, PayflowError)

    def test_error_can_be_raised(self):
        with pytest.raises(PayflowError):
            raise StateError("Cannot confirm")

        with pytest.raises(BackendUnavailableError):
            raise BackendUnavailableError("POST action/execute failed")


class TestBackendError:
    """Test BackendError raw signal fields."""

    def test_fields(self):
        error = BackendError("Cartão necessário", status_code=402, code="PAYMENT_METHOD_REQUIRED")
        assert str(error) == "Cartão necessário"
        assert error.message == "Cartão necessário"
        assert error.status_code == 402
        assert error.code == "PAYMENT_METHOD_REQUIRED"
        assert error.data == {}
        assert error.client_secret is None

    def test_client_secret_camel_case(self):
        error = BackendError(
            "Requires action",
            status_code=200,
            code="PAYMENT_REQUIRES_ACTION",
            data={"clientSecret": "pi_1_secret_x"},
        )
        assert error.client_secret == "pi_1_secret_x"

    def test_client_secret_snake_case(self):
        error = BackendError("Requires action", data={"client_secret": "pi_2_secret_y"})
        assert error.client_secret == "pi_2_secret_y"

    def test_empty_client_secret_is_none(self):
        error = BackendError("Requires action", data={"clientSecret": ""})
        assert error.client_secret is None
