# candidate_ranking/services/auth_service.py
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests
from google.auth import credentials as google_credentials
from google.auth import exceptions as google_exceptions

from candidate_ranking.services.logger import AppLogger

logger = AppLogger.get_logger(__name__)


class AuthError(Exception):
    """Sign-in was rejected or the auth service could not be reached"""


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    id_token: str
    refresh_token: Optional[str] = None
    anonymous: bool = False
    expires_in: Optional[int] = None


class AuthService:
    def __init__(self, api_key: Optional[str], emulator_host: Optional[str] = None, timeout: float = 30.0):
        self.api_key = api_key
        self.timeout = timeout
        if emulator_host:
            self.base_url = f"http://{emulator_host}/identitytoolkit.googleapis.com/v1"
            self.token_url = f"http://{emulator_host}/securetoken.googleapis.com/v1/token"
        else:
            self.base_url = "https://identitytoolkit.googleapis.com/v1"
            self.token_url = "https://securetoken.googleapis.com/v1/token"

    def sign_in_with_custom_token(self, token: str) -> AuthSession:
        """Exchange a pre-issued custom token for an ID token"""
        data = self._post(f"{self.base_url}/accounts:signInWithCustomToken",
                          json={"token": token, "returnSecureToken": True})
        session = self._session_from(data, anonymous=False)
        logger.info(f"Signed in with custom token as {session.user_id}")
        return session

    def sign_in_anonymously(self) -> AuthSession:
        """Create an anonymous account and sign in as it"""
        data = self._post(f"{self.base_url}/accounts:signUp", json={"returnSecureToken": True})
        session = self._session_from(data, anonymous=True)
        logger.info(f"Signed in anonymously as {session.user_id}")
        return session

    def refresh_session(self, session: AuthSession) -> AuthSession:
        """Trade the session's refresh token for a fresh ID token"""
        if not session.refresh_token:
            raise AuthError("Session has no refresh token")

        data = self._post(self.token_url, data={"grant_type": "refresh_token", "refresh_token": session.refresh_token})
        refreshed = AuthSession(
            user_id=data.get("user_id") or session.user_id,
            id_token=data.get("id_token", ""),
            refresh_token=data.get("refresh_token") or session.refresh_token,
            anonymous=session.anonymous,
            expires_in=_as_seconds(data.get("expires_in")),
        )
        logger.info(f"Refreshed ID token for {refreshed.user_id}")
        return refreshed

    def _post(self, url: str, json: Optional[dict] = None, data: Optional[dict] = None) -> dict:
        if not self.api_key:
            raise AuthError("Firebase config has no apiKey")

        try:
            response = requests.post(
                url,
                params={"key": self.api_key},
                json=json,
                data=data,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"Auth request failed: {e}") from e

        if response.status_code != 200:
            try:
                message = response.json().get("error", {}).get("message", response.text)
            except ValueError:
                message = response.text
            raise AuthError(f"Auth error {response.status_code}: {message}")

        return response.json()

    @staticmethod
    def _session_from(data: dict, anonymous: bool) -> AuthSession:
        user_id = data.get("localId")
        if not user_id:
            user_id = str(uuid.uuid4())
            logger.warning(f"Sign-in response carried no user id, using generated id {user_id}")
        return AuthSession(
            user_id=user_id,
            id_token=data.get("idToken", ""),
            refresh_token=data.get("refreshToken"),
            anonymous=anonymous,
            expires_in=_as_seconds(data.get("expiresIn")),
        )


def _as_seconds(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _expiry_after(seconds: Optional[int]) -> Optional[datetime]:
    if seconds is None:
        return None
    # google-auth compares expiry against naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(seconds=seconds)


class FirebaseUserCredentials(google_credentials.Credentials):
    """Google credentials carrying a Firebase ID token, refreshed through the secure token API.

    Firestore calls refresh() whenever the ID token is about to expire, so the
    realtime listener and writes keep working past the token's one-hour life.
    """

    def __init__(self, auth_service: AuthService, session: AuthSession):
        super().__init__()
        self._auth_service = auth_service
        self.session = session
        self.token = session.id_token
        self.expiry = _expiry_after(session.expires_in)

    def refresh(self, request):
        try:
            self.session = self._auth_service.refresh_session(self.session)
        except AuthError as e:
            raise google_exceptions.RefreshError(str(e)) from e
        self.token = self.session.id_token
        self.expiry = _expiry_after(self.session.expires_in)
