import pytest

from common.settings import (
    KnowledgeBaseSettings,
    MissingConfigurationError,
    require_env,
)

FULL_ENV = {
    "ACCOUNT_ID": "123456789012",
    "CERTIFICATE_ARN": "arn:aws:acm:us-east-1:123456789012:certificate/abc",
    "GOOGLE_APP_ID": "app-id",
    "GOOGLE_APP_SECRET": "app-secret",
}


def test_settings_from_env():
    settings = KnowledgeBaseSettings.from_env(FULL_ENV)

    assert settings.certificate_arn == FULL_ENV["CERTIFICATE_ARN"]
    assert settings.google_app_id == "app-id"
    assert settings.google_app_secret == "app-secret"


def test_secret_is_not_in_repr():
    settings = KnowledgeBaseSettings.from_env(FULL_ENV)

    assert "app-secret" not in repr(settings)


@pytest.mark.parametrize(
    "missing,message",
    [
        ("ACCOUNT_ID", "Account ID not defined. Stop."),
        ("CERTIFICATE_ARN", "Certificate ARN not defined. Stop."),
        ("GOOGLE_APP_ID", "Google App ID not defined. Stop."),
        ("GOOGLE_APP_SECRET", "Google App Secret not defined. Stop."),
    ],
)
def test_require_env_missing(missing: str, message: str):
    environ = {k: v for k, v in FULL_ENV.items() if k != missing}

    with pytest.raises(MissingConfigurationError) as exc_info:
        require_env(missing, environ)

    assert str(exc_info.value) == message
    assert exc_info.value.name == missing


def test_empty_value_counts_as_missing():
    with pytest.raises(MissingConfigurationError):
        require_env("ACCOUNT_ID", {"ACCOUNT_ID": ""})


def test_settings_validation_order():
    # Certificate is checked before the OAuth credentials
    with pytest.raises(MissingConfigurationError, match="Certificate ARN"):
        KnowledgeBaseSettings.from_env({})
    with pytest.raises(MissingConfigurationError, match="Google App Secret"):
        KnowledgeBaseSettings.from_env(
            {"CERTIFICATE_ARN": "arn", "GOOGLE_APP_ID": "app-id"}
        )


def test_require_env_reads_process_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ACCOUNT_ID", "210987654321")

    assert require_env("ACCOUNT_ID") == "210987654321"


def test_settings_reject_empty_values():
    with pytest.raises(ValueError):
        KnowledgeBaseSettings(certificate_arn="", google_app_id="id", google_app_secret="secret")
