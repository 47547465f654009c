"""
Shared Firebase app initialisation for the Firestore-backed stores.

All Firestore stores reuse one firebase_admin app (same credentials_path and project_id).
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)


def project_id_from_credentials_file(credentials_path: Union[Path, str]) -> Optional[str]:
    """Read project_id from a Google service account JSON file if present."""
    path = Path(credentials_path)
    if not path.is_file():
        return None
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read credentials file %s: %s", path, e)
        return None
    return data.get("project_id") or data.get("projectId")


def firestore_client(
    project_id: Optional[str] = None,
    credentials_path: Optional[Union[Path, str]] = None,
):
    """Initialise the default Firebase app once and return a Firestore client."""
    if not firebase_admin._apps:
        project_id = project_id or (
            project_id_from_credentials_file(credentials_path) if credentials_path else None
        )
        opts = {"projectId": project_id} if project_id else None
        if credentials_path:
            cred = credentials.Certificate(str(Path(credentials_path).resolve()))
            firebase_admin.initialize_app(cred, opts)
        else:
            firebase_admin.initialize_app(options=opts)
        logger.info("Firebase app initialised (project=%s)", project_id or "inferred")
    return firestore.client()
