import logging

from sensio_core.application.cache import ReadingCache
from sensio_core.application.dispatch import ToolDispatcher
from sensio_core.application.query_readings import QueryContext
from sensio_core.config.environments import AccessBackend, DataSource, Settings
from sensio_core.domain.ports import DeviceDirectory, IndoorDataSource

from sensio_server.adapters.access.allowlist import AllowlistDirectory
from sensio_server.adapters.db.repository import SqlDeviceDirectory
from sensio_server.adapters.db.session import create_session_factory
from sensio_server.adapters.sensio.client import SensioApiClient
from sensio_server.adapters.supabase.directory import SupabaseDeviceDirectory
from sensio_server.adapters.supabase.proxy import SupabaseProxySource

log = logging.getLogger(__name__)


def setup_logging(config: Settings) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    return None


def build_source(config: Settings) -> IndoorDataSource:
    if config.DATA_SOURCE == DataSource.SUPABASE:
        return SupabaseProxySource(
            base_url=config.SUPABASE_URL,
            service_key=config.SUPABASE_SERVICE_KEY,
            timeout=config.HTTP_TIMEOUT_SEC,
        )
    return SensioApiClient(
        api_url=config.SENSIO_API_URL,
        api_key=config.SENSIO_API_KEY,
        timeout=config.HTTP_TIMEOUT_SEC,
    )


def build_directory(config: Settings) -> DeviceDirectory:
    if config.ACCESS_BACKEND == AccessBackend.SUPABASE:
        return SupabaseDeviceDirectory(
            base_url=config.SUPABASE_URL,
            service_key=config.SUPABASE_SERVICE_KEY,
            timeout=config.HTTP_TIMEOUT_SEC,
        )
    if config.ACCESS_BACKEND == AccessBackend.DATABASE:
        return SqlDeviceDirectory(create_session_factory(config.DATABASE_URL))
    return AllowlistDirectory(config.allowed_device_serials)


def build_dispatcher(config: Settings) -> ToolDispatcher:
    """Wire the configured backends, one shared cache, and the dispatcher."""
    config.validate_for_startup()

    ctx = QueryContext(
        source=build_source(config),
        directory=build_directory(config),
        cache=ReadingCache(latest_ttl=config.CACHE_TTL_LATEST, history_ttl=config.CACHE_TTL_HISTORY),
        max_window_days=config.MAX_TIME_WINDOW_DAYS,
    )
    log.info(
        "Dispatcher ready: source=%s access=%s user=%s",
        config.DATA_SOURCE.value,
        config.ACCESS_BACKEND.value,
        config.SENSIO_USER_ID,
    )
    return ToolDispatcher(
        ctx,
        caller_id=config.SENSIO_USER_ID,
        default_top_k=config.DEFAULT_TOP_K,
        default_resolution=config.DEFAULT_RESOLUTION,
    )
