import asyncio

import pytest

from candidate_ranking.config import StoreConfig
from candidate_ranking.services.candidate_store import CandidateStore
from fakes import COLLECTION_PATH, FIREBASE_CONFIG, FakeAuthService, FakeFirestore


@pytest.fixture
def config() -> StoreConfig:
    return StoreConfig(firebase_config=FIREBASE_CONFIG, app_id="test-app")


@pytest.fixture
def fake_db() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def auth() -> FakeAuthService:
    return FakeAuthService()


@pytest.fixture
def store(config, auth, fake_db) -> CandidateStore:
    return CandidateStore(config, auth_service=auth, firestore_factory=lambda *args: fake_db)


@pytest.fixture
def ready_store(store) -> CandidateStore:
    assert asyncio.run(store.initialize()) is True
    return store


@pytest.fixture
def collection(fake_db):
    return fake_db.collection(COLLECTION_PATH)
