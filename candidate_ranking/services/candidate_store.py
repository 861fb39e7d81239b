# candidate_ranking/services/candidate_store.py
import asyncio
import copy
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel

from candidate_ranking.config import StoreConfig
from candidate_ranking.firebase_config import get_firestore
from candidate_ranking.schemas.candidate import Category
from candidate_ranking.services import export_service
from candidate_ranking.services.auth_service import AuthService
from candidate_ranking.services.logger import AppLogger

logger = AppLogger.get_logger(__name__)

DATA_UPDATED = "data updated"


def _score_of(candidate: Mapping[str, Any]) -> float:
    try:
        return float(candidate.get("pontuacao", 0))
    except (TypeError, ValueError):
        return 0.0


class CandidateStore:
    """Facade over the signed-in user's candidate collection.

    Writes go straight to Firestore. Reads are served from a local list that a
    realtime listener replaces on every change; listeners registered with
    add_listener() are called after each replacement.
    """

    def __init__(self, config: StoreConfig, auth_service: Optional[AuthService] = None,
                 firestore_factory: Callable = get_firestore):
        self.config = config
        self._auth_service = auth_service
        self._firestore_factory = firestore_factory

        self.db = None
        self.user_id: Optional[str] = None
        self._collection = None
        self._watch = None

        self._candidates: List[Dict[str, Any]] = []
        self._version = 0
        self._updated = threading.Condition()
        self._listeners: List[Callable[[], None]] = []

        self._ready = False
        self._initializing = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def snapshot_version(self) -> int:
        return self._version

    @property
    def collection_path(self) -> str:
        return f"artifacts/{self.config.app_id}/users/{self.user_id}/candidates"

    async def initialize(self) -> bool:
        """Sign in, connect to Firestore and start listening for changes"""
        if self._ready or self._initializing:
            logger.warning("Candidate store already initialized or initializing")
            return self._ready

        self._initializing = True
        try:
            options = self.config.firebase_options()
            auth = self._auth_service or AuthService(
                options.get("apiKey"), emulator_host=self.config.auth_emulator_host
            )

            if self.config.initial_auth_token:
                session = await asyncio.to_thread(auth.sign_in_with_custom_token, self.config.initial_auth_token)
            else:
                session = await asyncio.to_thread(auth.sign_in_anonymously)

            self.user_id = session.user_id
            self.db = await asyncio.to_thread(
                self._firestore_factory, options, session, self.config.service_account_path, auth
            )
            self._collection = self.db.collection(self.collection_path)
            self._watch = self._collection.on_snapshot(self._on_snapshot)

            self._ready = True
            logger.info(f"Candidate store initialized for user {self.user_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to initialize candidate store: {e}")
            return False
        finally:
            self._initializing = False

    def close(self):
        """Detach the realtime listener"""
        if self._watch is not None:
            try:
                self._watch.unsubscribe()
            except Exception as e:
                logger.error(f"Failed to detach candidate listener: {e}")
            self._watch = None

    def add_listener(self, callback: Callable[[], None]):
        """Register a callable fired with no arguments on every DATA_UPDATED"""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _on_snapshot(self, docs, changes, read_time):
        try:
            candidates = [{"id": doc.id, **(doc.to_dict() or {})} for doc in docs]
            with self._updated:
                self._candidates = candidates
                self._version += 1
                self._updated.notify_all()
            logger.debug(f"Local candidates refreshed: {len(candidates)} records")
        except Exception as e:
            logger.error(f"Error receiving candidate updates: {e}")
            return
        self._dispatch(DATA_UPDATED)

    def _dispatch(self, event: str):
        for callback in list(self._listeners):
            try:
                callback()
            except Exception as e:
                logger.error(f"Listener for '{event}' failed: {e}")

    async def wait_for(self, predicate: Callable[[List[Dict[str, Any]]], bool],
                       timeout: Optional[float] = None) -> bool:
        """Wait until a delivered snapshot satisfies predicate; False on timeout"""
        def _wait():
            with self._updated:
                return self._updated.wait_for(
                    lambda: self._version > 0 and predicate(copy.deepcopy(self._candidates)),
                    timeout,
                )
        return bool(await asyncio.to_thread(_wait))

    def _check_ready(self, action: str) -> bool:
        if not self._ready:
            logger.error(f"Candidate store is not ready, cannot {action}")
            return False
        return True

    async def add_candidate(self, region: str, candidate: Union[Mapping[str, Any], BaseModel]) -> bool:
        """Write a new candidate; the local list catches up through the listener"""
        if not self._check_ready("add candidate"):
            return False

        if isinstance(candidate, BaseModel):
            candidate = candidate.to_document() if hasattr(candidate, "to_document") else candidate.model_dump()

        document = {
            **candidate,
            "region": region,
            "timestamp": export_service.utc_timestamp(),
        }
        try:
            _, doc_ref = await asyncio.to_thread(self._collection.add, document)
            logger.info(f"Candidate {doc_ref.id} added for user {self.user_id} in region {region}")
            return True
        except Exception as e:
            logger.error(f"Failed to add candidate for user {self.user_id}: {e}")
            return False

    def get_region_data(self, region) -> Dict[str, List[Dict[str, Any]]]:
        """Candidates of one region grouped by category, highest score first"""
        candidates = self._candidates
        in_region = [c for c in candidates if str(c.get("region")) == str(region)]

        # sorted() is stable with reverse=True, so equal scores keep delivery order
        return {
            category.value: sorted(
                (c for c in in_region if c.get("tipo") == category.value),
                key=_score_of,
                reverse=True,
            )
            for category in Category
        }

    def get_all_data(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._candidates)

    async def clear_all(self) -> bool:
        """Delete every candidate document for the current user"""
        if not self._check_ready("clear candidates"):
            return False

        try:
            docs = await asyncio.to_thread(lambda: list(self._collection.stream()))
            results = await asyncio.gather(
                *(asyncio.to_thread(doc.reference.delete) for doc in docs),
                return_exceptions=True,
            )
        except Exception as e:
            logger.error(f"Failed to clear candidates for user {self.user_id}: {e}")
            return False

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(
                f"Failed to delete {len(failures)} of {len(docs)} candidates for user {self.user_id}: {failures[0]}"
            )
            return False

        logger.info(f"Cleared {len(docs)} candidates for user {self.user_id}")
        return True

    async def restore_data(self, payload) -> bool:
        """Replace the user's candidates with the valid records of a backup payload"""
        if not self._check_ready("restore candidates"):
            return False

        records = export_service.parse_restore_payload(payload)
        if records is None:
            return False

        if not await self.clear_all():
            logger.error("Restore aborted: existing candidates could not be cleared")
            return False

        documents = export_service.build_restore_documents(records)
        results = await asyncio.gather(
            *(asyncio.to_thread(self._collection.add, document) for document in documents),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(
                f"Failed to restore {len(failures)} of {len(documents)} candidates for user {self.user_id}: {failures[0]}"
            )
            return False

        logger.info(f"Restored {len(documents)} of {len(records)} candidates for user {self.user_id}")
        return True

    def export_json(self) -> str:
        return export_service.to_json(self._candidates)

    def export_csv(self) -> str:
        return export_service.to_csv(self._candidates)
