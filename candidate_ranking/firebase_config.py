import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud import firestore as gcloud_firestore
from pathlib import Path
from typing import Any, Dict, Optional

from candidate_ranking.services.auth_service import AuthService, AuthSession, FirebaseUserCredentials

ADMIN_APP_NAME = "candidate-ranking"

def get_firestore(options: Dict[str, Any], session: AuthSession, service_account_path: Optional[str] = None,
                  auth_service: Optional[AuthService] = None):
    """Initialize and return a Firestore client for the signed-in session"""
    project_id = options.get("projectId")
    if not project_id:
        raise ValueError("Firebase config missing projectId")

    if service_account_path:
        if ADMIN_APP_NAME not in firebase_admin._apps:
            key_path = Path(service_account_path)
            if not key_path.exists():
                raise FileNotFoundError(f"Missing Firebase key at {key_path}")
            cred = credentials.Certificate(str(key_path))
            firebase_admin.initialize_app(cred, {"projectId": project_id}, name=ADMIN_APP_NAME)
        return firestore.client(firebase_admin.get_app(ADMIN_APP_NAME))

    # Client access is authorized by the user's ID token, so security rules apply per user
    auth_service = auth_service or AuthService(options.get("apiKey"))
    return gcloud_firestore.Client(project=project_id, credentials=FirebaseUserCredentials(auth_service, session))
