"""
Tests for Sheets payload conversion, source construction and configuration.
"""
import pytest
from google.auth.exceptions import RefreshError

from ta_dashboard import config as config_module
from ta_dashboard.config import Config, get_config, load_config, reset_config
from ta_dashboard.sheets import SheetsSource, build_source, tabs_from_spreadsheet


SPREADSHEET = {
    "sheets": [
        {
            "properties": {"title": "Engineering"},
            "data": [
                {
                    "rowData": [
                        {"values": [{"formattedValue": "Role"}, {"formattedValue": "Applied"}]},
                        {"values": [{"formattedValue": "Backend"}, {}]},
                        {},
                    ]
                }
            ],
        },
        {"properties": {"title": "Empty"}, "data": [{}]},
        {"properties": {"title": "No grid"}},
    ]
}


class TestTabsFromSpreadsheet:
    def test_titles_and_cells(self):
        tabs = tabs_from_spreadsheet(SPREADSHEET)
        assert [tab.title for tab in tabs] == ["Engineering", "Empty", "No grid"]
        assert tabs[0].rows == [["Role", "Applied"], ["Backend", None], []]

    def test_tabs_without_grid_data_are_empty(self):
        tabs = tabs_from_spreadsheet(SPREADSHEET)
        assert tabs[1].rows == []
        assert tabs[2].rows == []

    def test_empty_payload(self):
        assert tabs_from_spreadsheet({}) == []


class TestBuildSource:
    def test_missing_service_account_file_means_no_source(self, tmp_path):
        config = Config(credentials_file=str(tmp_path / "missing.json"))
        assert build_source(config) is None

    def test_missing_oauth_client_secrets_means_no_source(self, tmp_path, monkeypatch):
        monkeypatch.setattr("ta_dashboard.sheets.CLIENT_SECRETS_PATH", tmp_path / "credentials.json")
        config = Config(token_file=str(tmp_path / "token.json"))
        assert build_source(config) is None

    def test_service_account_credentials(self, tmp_path, monkeypatch):
        key_file = tmp_path / "key.json"
        key_file.write_text("{}")
        sentinel = object()
        monkeypatch.setattr(
            "ta_dashboard.sheets.service_account.Credentials.from_service_account_file",
            lambda path, scopes: sentinel,
        )
        source = build_source(Config(credentials_file=str(key_file)))
        assert isinstance(source, SheetsSource)
        assert source.credentials is sentinel


@pytest.fixture
def clean_config(monkeypatch):
    for name in config_module.ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


class TestConfig:
    def test_defaults_when_file_missing(self, tmp_path, clean_config):
        config = load_config(tmp_path / "config.yaml")
        assert config.spreadsheet_id is None
        assert config.port == 3001
        assert config.timezone_offset_hours == 8.0
        assert config.hidden_when_empty == ["Technical Assessment"]

    def test_yaml_values(self, tmp_path, clean_config):
        path = tmp_path / "config.yaml"
        path.write_text("spreadsheet_id: abc\nconversion_threshold: 25\ninactive_after_days: 14\n")
        config = load_config(path)
        assert config.spreadsheet_id == "abc"
        assert config.conversion_threshold == 25.0
        assert config.inactive_after_days == 14
        assert get_config() is config

    def test_environment_overrides_file(self, tmp_path, clean_config, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("spreadsheet_id: abc\nport: 4000\n")
        monkeypatch.setenv("GOOGLE_SHEET_ID", "from-env")
        monkeypatch.setenv("PORT", "5000")
        config = load_config(path)
        assert config.spreadsheet_id == "from-env"
        assert config.port == 5000

    def test_empty_file(self, tmp_path, clean_config):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path).log_level == "INFO"


class _ExpiredCredentials:
    valid = False
    expired = True
    refresh_token = "refresh-token"

    def refresh(self, request):
        raise RefreshError("invalid_grant: Token has been expired or revoked.")


class TestBuildSourceCredentialFailures:
    def test_revoked_token_means_no_source(self, tmp_path, monkeypatch):
        token_file = tmp_path / "token.json"
        token_file.write_text("{}")
        monkeypatch.setattr(
            "ta_dashboard.sheets.Credentials.from_authorized_user_file",
            lambda path, scopes: _ExpiredCredentials(),
        )
        assert build_source(Config(token_file=str(token_file))) is None

    def test_corrupt_token_file_means_no_source(self, tmp_path):
        token_file = tmp_path / "token.json"
        token_file.write_text("not json")
        assert build_source(Config(token_file=str(token_file))) is None
