"""
Firebase Admin SDK initialization and token verification.
Initialized once from the app lifespan.
"""
import json
import os
import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials, auth

from genius.config import settings

logger = logging.getLogger(__name__)

_firebase_app: Optional[firebase_admin.App] = None


def _load_credentials(value: str):
    """FIREBASE_CREDENTIALS_JSON may be a file path or the JSON itself."""
    if os.path.exists(value):
        logger.info(f"Loaded Firebase credentials from file: {value}")
        return credentials.Certificate(value)
    try:
        cred_dict = json.loads(value)
    except json.JSONDecodeError:
        raise ValueError("FIREBASE_CREDENTIALS_JSON must be a valid file path or JSON string")
    logger.info("Loaded Firebase credentials from JSON string")
    return credentials.Certificate(cred_dict)


def initialize_firebase() -> None:
    """
    Initialize Firebase Admin SDK.

    Without FIREBASE_CREDENTIALS_JSON, application default credentials
    (gcloud) are used.
    """
    global _firebase_app

    if _firebase_app is not None:
        return

    if not settings.firebase_project_id:
        raise ValueError("FIREBASE_PROJECT_ID must be set")

    if settings.firebase_credentials_json:
        cred = _load_credentials(settings.firebase_credentials_json)
    else:
        cred = credentials.ApplicationDefault()

    _firebase_app = firebase_admin.initialize_app(
        cred,
        {"projectId": settings.firebase_project_id}
    )


def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token.

    Returns:
        Decoded claims (uid, email, name, ...)

    Raises:
        ValueError: If token is invalid, expired, or revoked
    """
    if _firebase_app is None:
        raise RuntimeError("Firebase Admin SDK not initialized. Call initialize_firebase() first.")

    try:
        return auth.verify_id_token(token)
    except ValueError:
        raise
    except Exception as e:
        raise ValueError(f"Token verification failed: {str(e)}")
