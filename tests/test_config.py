import pytest

from candidate_ranking import firebase_config
from candidate_ranking.config import DEFAULT_APP_ID, StoreConfig
from candidate_ranking.services.auth_service import AuthService, AuthSession, FirebaseUserCredentials


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("FIREBASE_CONFIG", "INITIAL_AUTH_TOKEN", "APP_ID", "FIREBASE_SERVICE_ACCOUNT",
                 "FIREBASE_AUTH_EMULATOR_HOST"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_from_env_defaults(clean_env) -> None:
    config = StoreConfig.from_env()

    assert config.firebase_config == "{}"
    assert config.initial_auth_token is None
    assert config.app_id == DEFAULT_APP_ID
    assert config.auth_emulator_host is None
    assert config.firebase_options() == {}


def test_from_env_reads_values(clean_env) -> None:
    clean_env.setenv("FIREBASE_CONFIG", '{"projectId": "p1", "apiKey": "k1"}')
    clean_env.setenv("INITIAL_AUTH_TOKEN", "token")
    clean_env.setenv("APP_ID", "rankings")
    clean_env.setenv("FIREBASE_AUTH_EMULATOR_HOST", "localhost:9099")

    config = StoreConfig.from_env()

    assert config.firebase_options() == {"projectId": "p1", "apiKey": "k1"}
    assert config.initial_auth_token == "token"
    assert config.app_id == "rankings"
    assert config.auth_emulator_host == "localhost:9099"


def test_firebase_options_rejects_non_object() -> None:
    with pytest.raises(ValueError):
        StoreConfig(firebase_config="[1, 2]").firebase_options()
    with pytest.raises(ValueError):
        StoreConfig(firebase_config="{oops").firebase_options()


def test_get_firestore_requires_project_id() -> None:
    with pytest.raises(ValueError, match="projectId"):
        firebase_config.get_firestore({}, AuthSession(user_id="u", id_token="t"))


def test_get_firestore_uses_refreshable_session_credentials(monkeypatch) -> None:
    created = {}

    def fake_client(project=None, credentials=None):
        created["project"] = project
        created["credentials"] = credentials
        return "client"

    monkeypatch.setattr(firebase_config.gcloud_firestore, "Client", fake_client)
    auth = AuthService("api-key")
    session = AuthSession(user_id="u", id_token="id-token", refresh_token="r-1", expires_in=3600)

    client = firebase_config.get_firestore({"projectId": "p1"}, session, None, auth)

    assert client == "client"
    assert created["project"] == "p1"
    credentials = created["credentials"]
    assert isinstance(credentials, FirebaseUserCredentials)
    assert credentials.token == "id-token"
    assert credentials.session.refresh_token == "r-1"
    assert credentials.expired is False


def test_get_firestore_missing_service_account_key(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        firebase_config.get_firestore(
            {"projectId": "p1"}, AuthSession(user_id="u", id_token="t"), str(tmp_path / "missing.json")
        )
