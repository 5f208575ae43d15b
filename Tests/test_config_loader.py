import pytest
import logging
from unittest.mock import MagicMock, mock_open
# Import the module we are testing
from argus_intel.core import config_loader
from argus_intel.core.schemas import AppConfig, TargetKind


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Fixture to clear relevant env vars before each test."""
    vars_to_clear = [
        "VAULT_ADDR", "VAULT_TOKEN", "VAULT_SECRET_PATH",
        "GOOGLE_API_KEY", "API_KEY",
    ]
    for var in vars_to_clear:
        monkeypatch.delenv(var, raising=False)

@pytest.fixture
def mock_hvac(mocker):
    """Fixture to mock the hvac.Client."""
    mock_client = MagicMock()
    mocker.patch('hvac.Client', return_value=mock_client)
    return mock_client

@pytest.fixture
def mock_yaml(mocker):
    """Fixture to mock yaml.safe_load and builtins.open."""
    mock_open_func = mock_open(read_data="app_name: Test App")
    mocker.patch("builtins.open", mock_open_func)

    mock_yaml_load = mocker.patch("yaml.safe_load", return_value={"app_name": "Test App from YAML"})
    return mock_yaml_load, mock_open_func

def _set_vault_env(monkeypatch, token="test_token"):
    monkeypatch.setenv("VAULT_ADDR", "http://127.0.0.1:8200")
    monkeypatch.setenv("VAULT_TOKEN", token)
    monkeypatch.setenv("VAULT_SECRET_PATH", "secret/argus")


# --- Tests for get_secrets_from_vault ---

def test_get_secrets_from_vault_success(mock_hvac, monkeypatch, caplog):
    """Tests successful retrieval of secrets from Vault."""
    _set_vault_env(monkeypatch)
    mock_hvac.is_authenticated.return_value = True
    mock_hvac.secrets.kv.v2.read_secret_version.return_value = {
        "data": {"data": {"GOOGLE_API_KEY": "vault_key"}}
    }

    with caplog.at_level(logging.INFO):
        secrets = config_loader.get_secrets_from_vault()

    assert secrets == {"GOOGLE_API_KEY": "vault_key"}
    assert "Successfully loaded secrets from HashiCorp Vault" in caplog.text

def test_get_secrets_from_vault_missing_env_vars(caplog):
    """Tests that Vault is skipped if env vars are not set."""
    with caplog.at_level(logging.INFO):
        secrets = config_loader.get_secrets_from_vault()

    assert secrets == {}
    assert "Vault environment variables not fully set" in caplog.text

def test_get_secrets_from_vault_auth_failed(mock_hvac, monkeypatch, caplog):
    """Tests failure to authenticate with Vault."""
    _set_vault_env(monkeypatch, token="bad_token")
    mock_hvac.is_authenticated.return_value = False

    with caplog.at_level(logging.ERROR):
        secrets = config_loader.get_secrets_from_vault()

    assert secrets == {}
    assert "Vault authentication failed" in caplog.text

def test_get_secrets_from_vault_exception(mock_hvac, monkeypatch, caplog):
    """Tests a generic exception during Vault communication."""
    _set_vault_env(monkeypatch)
    mock_hvac.is_authenticated.side_effect = Exception("Connection error")

    with caplog.at_level(logging.ERROR):
        secrets = config_loader.get_secrets_from_vault()

    assert secrets == {}
    assert "Failed to fetch secrets from Vault: Connection error" in caplog.text


# --- Tests for ApiKeys Class ---

def test_api_keys_default_is_none():
    assert config_loader.ApiKeys().google_api_key is None

def test_api_keys_load_from_env(monkeypatch):
    """Tests loading the Gemini key from GOOGLE_API_KEY."""
    monkeypatch.setenv("GOOGLE_API_KEY", "env_key")
    assert config_loader.ApiKeys().google_api_key == "env_key"

def test_api_keys_api_key_fallback(monkeypatch):
    """API_KEY is accepted when GOOGLE_API_KEY is not set."""
    monkeypatch.setenv("API_KEY", "fallback_key")
    assert config_loader.ApiKeys().google_api_key == "fallback_key"

def test_api_keys_vault_priority(mock_hvac, monkeypatch):
    """
    Tests the settings_customise_sources method to ensure Vault
    secrets override environment variables.
    """
    _set_vault_env(monkeypatch)
    monkeypatch.setenv("GOOGLE_API_KEY", "key_from_env")
    mock_hvac.is_authenticated.return_value = True
    mock_hvac.secrets.kv.v2.read_secret_version.return_value = {
        "data": {"data": {"GOOGLE_API_KEY": "key_from_vault"}}
    }

    assert config_loader.ApiKeys().google_api_key == "key_from_vault"


# --- Tests for load_config_from_yaml ---

def test_load_config_success(mock_yaml):
    """Tests loading a valid config.yaml."""
    mock_load, _ = mock_yaml
    mock_load.return_value = {
        "app_name": "Test App",
        "gemini": {"model": "gemini-test"},
        "dashboard": {"default_language": "en", "default_target": "EMAIL"},
        "logging": {"level": "DEBUG"},
    }

    config = config_loader.load_config_from_yaml()

    assert isinstance(config, AppConfig)
    assert config.app_name == "Test App"
    assert config.gemini.model == "gemini-test"
    assert config.dashboard.default_language == "en"
    assert config.dashboard.default_target is TargetKind.EMAIL
    assert config.logging.level == "DEBUG"

def test_load_config_empty_file(mock_yaml):
    mock_load, _ = mock_yaml
    mock_load.return_value = None
    config = config_loader.load_config_from_yaml()
    assert config == AppConfig()

def test_load_config_file_not_found(mocker, caplog):
    """Tests fallback to default config if config.yaml is not found."""
    mocker.patch("builtins.open", side_effect=FileNotFoundError)

    with caplog.at_level(logging.WARNING):
        config = config_loader.load_config_from_yaml()

    assert "config.yaml not found. Using default application settings." in caplog.text
    assert isinstance(config, AppConfig)
    assert config.app_name == "Argus Intel"  # Default value
    assert config.dashboard.default_language == "fr"
    assert config.gemini.model == "gemini-2.5-flash"

def test_load_config_validation_error(mock_yaml, caplog):
    """Tests that the program exits on a Pydantic validation error."""
    mock_load, _ = mock_yaml
    mock_load.return_value = {"dashboard": {"default_language": "de"}}

    with pytest.raises(SystemExit) as excinfo:
        with caplog.at_level(logging.CRITICAL):
            config_loader.load_config_from_yaml()

    assert excinfo.value.code == 1
    assert "Invalid configuration in config.yaml" in caplog.text

def test_load_config_generic_exception(mocker, caplog):
    """Tests that the program exits on any other file loading error."""
    mocker.patch("builtins.open", side_effect=PermissionError("Permission denied"))

    with pytest.raises(SystemExit) as excinfo:
        with caplog.at_level(logging.CRITICAL):
            config_loader.load_config_from_yaml()

    assert excinfo.value.code == 1
    assert "An unexpected error occurred" in caplog.text
    assert "Permission denied" in caplog.text
