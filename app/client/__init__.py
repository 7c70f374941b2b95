"""Offline-first field client for the survey backend."""
from app.client.config import ClientSettings
from app.client.controller import FieldClient
from app.client.models import LocalResponse
from app.client.session import ClientSession
from app.client.storage import KeyValueStore, LocalResponseStore
from app.client.sync import SyncClient, SyncResult

__all__ = [
    "ClientSettings",
    "FieldClient",
    "LocalResponse",
    "ClientSession",
    "KeyValueStore",
    "LocalResponseStore",
    "SyncClient",
    "SyncResult",
]
