"""Field client controller.

``FieldClient`` owns one ``ClientSession`` and wires storage, the API
client, connectivity, caching and sync together. Typical use::

    async with FieldClient() as client:
        await client.login("collector@example.com", "secret")
        await client.load_template(1)
        await client.submit_survey(answers, started_at=started)
        await client.sync_now()
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

import httpx

from app.analytics.aggregation import DashboardKeys, aggregate
from app.analytics.ranking import derive_top_ranked
from app.client.api_client import API_PREFIX, SurveyApiClient
from app.client.cache import CachingFetcher, ResponseCache
from app.client.config import ClientSettings
from app.client.device import DeviceIdentity, generate_local_id
from app.client.errors import ApiError, NotAuthenticatedError, SyncAuthError, SyncTransportError
from app.client.models import LocalResponse
from app.client.network import NetworkMonitor
from app.client.scheduler import SyncScheduler
from app.client.session import ClientSession
from app.client.storage import KeyValueStore, LocalResponseStore
from app.client.sync import SyncClient, SyncResult
from app.schemas.analytics import DashboardSummary
from app.schemas.response import SyncStatus

logger = logging.getLogger(__name__)

ALREADY_SYNCED = "Response already synced"


class FieldClient:
    """Offline-first survey collection on a field device."""

    def __init__(self, settings: Optional[ClientSettings] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 online: bool = True):
        self.settings = settings or ClientSettings()
        kv = KeyValueStore(self.settings.DATA_DIR)

        self.session = ClientSession(base_url=self.settings.BASE_URL)
        self.store = LocalResponseStore(kv)
        self.device = DeviceIdentity(kv)
        self.network = NetworkMonitor(online=online)
        self.api = SurveyApiClient(
            self.settings.BASE_URL,
            timeout=self.settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )
        self.fetcher = CachingFetcher(self._fetch, ResponseCache(kv))
        self.sync_client = SyncClient(
            self.store, self.api, self.network, self.session,
            batch_size=self.settings.SYNC_BATCH_SIZE,
        )
        self.scheduler = SyncScheduler(
            self.sync_client, self.network, self.store,
            interval_seconds=self.settings.SYNC_INTERVAL_SECONDS,
        )

    async def __aenter__(self) -> "FieldClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def start(self) -> None:
        """Probe connectivity and start background sync triggers."""
        await self.network.probe(self.api)
        self.scheduler.start()

    async def close(self) -> None:
        await self.scheduler.stop()
        await self.api.aclose()

    def set_online(self, online: bool) -> None:
        self.network.set_online(online)

    # --- Session ------------------------------------------------------------

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Log in and keep the token in the session.

        Raises:
            NotAuthenticatedError: If the credentials are refused
        """
        try:
            body = await self.api.login(email, password)
        except SyncAuthError as exc:
            raise NotAuthenticatedError(str(exc)) from exc

        self.session.token = body["access_token"]
        self.session.user = body["user"]
        logger.info("Logged in as user %s", self.session.user.get("id"))
        return self.session.user

    def logout(self) -> None:
        self.session.clear()

    async def _fetch(self, path: str) -> Any:
        return await self.api.get_json(path, token=self.session.require_token())

    async def load_template(self, template_id: int) -> Dict[str, Any]:
        """Fetch a template, falling back to the cached copy while offline."""
        template = await self.fetcher.get(f"{API_PREFIX}/survey-templates/{template_id}")
        self.session.template = template
        return template

    # --- Collection ---------------------------------------------------------

    def build_response(self, answers: Mapping[str, Any], started_at: datetime,
                       completed_at: Optional[datetime] = None,
                       completion_time_seconds: Optional[float] = None,
                       sections_completed: Iterable[str] = (),
                       template_id: Optional[int] = None,
                       location: Optional[Dict[str, Any]] = None,
                       contact_info: Optional[Dict[str, Any]] = None) -> LocalResponse:
        """Create a pending local record; ``top_ranked`` is derived from the answers."""
        if template_id is None:
            if not self.session.template:
                raise ValueError("No template loaded and no template_id given")
            template_id = self.session.template["id"]

        completed_at = completed_at or datetime.now(timezone.utc)
        if completion_time_seconds is None:
            completion_time_seconds = max((completed_at - started_at).total_seconds(), 0.0)

        response = LocalResponse.model_validate({
            "id": generate_local_id(),
            "template_id": template_id,
            "device_info": {
                "device_id": self.device.get(),
                "platform": self.settings.PLATFORM,
                "app_version": self.settings.APP_VERSION,
            },
            "answers": dict(answers),
            "analytics": {
                "start_time": started_at,
                "end_time": completed_at,
                "completion_time_seconds": completion_time_seconds,
                "sections_completed": list(sections_completed),
            },
            "location": location,
            "contact_info": contact_info,
        })
        response.top_ranked = derive_top_ranked(response.answers)
        return response

    async def submit_survey(self, answers: Mapping[str, Any], started_at: datetime,
                            **kwargs) -> LocalResponse:
        """
        Store a completed survey, then deliver it now or queue it for sync.

        The record is persisted before any network access, so nothing is lost
        if delivery fails. Raises ``SyncAuthError`` after queueing when the
        server refuses the session.
        """
        response = self.build_response(answers, started_at, **kwargs)
        self.store.append(response)

        if not (self.network.is_online and self.session.is_authenticated):
            self.store.enqueue(response.id)
            logger.info("Queued response %s for sync", response.id)
            return self.store.get(response.id)

        try:
            created = await self.api.submit_response(response.to_candidate(), self.session.token)
        except SyncTransportError as exc:
            logger.info("Immediate delivery failed, queueing %s: %s", response.id, exc)
            self.store.enqueue(response.id)
        except SyncAuthError:
            self.store.enqueue(response.id)
            raise
        except ApiError as exc:
            if exc.status_code == 409:
                self.store.record_outcome(response.id, SyncStatus.SYNCED, ALREADY_SYNCED)
            else:
                logger.warning("Server rejected response %s: %s", response.id, exc)
                self.store.record_outcome(response.id, SyncStatus.FAILED, exc.detail or str(exc))
        else:
            self.store.record_outcome(response.id, SyncStatus.SYNCED, "Submitted online",
                                      server_id=created.get("id"))

        return self.store.get(response.id)

    async def sync_now(self) -> SyncResult:
        return await self.scheduler.request_sync()

    # --- Local state --------------------------------------------------------

    def pending_count(self) -> int:
        return self.store.pending_count()

    def failed_responses(self) -> List[LocalResponse]:
        """Responses the server rejected; they need manual follow up."""
        return [response for response in self.store.list_all() if response.sync_status == SyncStatus.FAILED]

    def dashboard(self, keys: DashboardKeys = DashboardKeys()) -> DashboardSummary:
        """Dashboard statistics over every response stored on this device."""
        return aggregate((response.to_snapshot() for response in self.store.list_all()), keys)
