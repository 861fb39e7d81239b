# candidate_ranking/config.py
import json
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_APP_ID = "default-app-id"


class StoreConfig(BaseModel):
    """Everything the candidate store needs to reach Firebase."""

    # Raw JSON blob, parsed during initialization so a malformed value
    # leaves the store not-ready instead of failing at startup
    firebase_config: str = "{}"
    initial_auth_token: Optional[str] = None
    app_id: str = DEFAULT_APP_ID
    service_account_path: Optional[str] = None
    auth_emulator_host: Optional[str] = None

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Build the config from environment variables (and a .env file if present)"""
        load_dotenv()
        return cls(
            firebase_config=os.getenv("FIREBASE_CONFIG") or "{}",
            initial_auth_token=os.getenv("INITIAL_AUTH_TOKEN") or None,
            app_id=os.getenv("APP_ID") or DEFAULT_APP_ID,
            service_account_path=os.getenv("FIREBASE_SERVICE_ACCOUNT") or None,
            auth_emulator_host=os.getenv("FIREBASE_AUTH_EMULATOR_HOST") or None,
        )

    def firebase_options(self) -> Dict[str, Any]:
        options = json.loads(self.firebase_config)
        if not isinstance(options, dict):
            raise ValueError("FIREBASE_CONFIG must be a JSON object")
        return options
