import pytest
from sensio_core.config.environments import Settings

from sensio_server.adapters.access.allowlist import AllowlistDirectory
from sensio_server.adapters.db.repository import SqlDeviceDirectory
from sensio_server.adapters.sensio.client import SensioApiClient
from sensio_server.adapters.supabase.directory import SupabaseDeviceDirectory
from sensio_server.adapters.supabase.proxy import SupabaseProxySource
from sensio_server.bootstrap import build_directory, build_dispatcher, build_source


def make_settings(**overrides):
    values = {
        "SENSIO_API_KEY": "key",
        "ALLOWED_DEVICE_SERIALS": "SA1, SA2",
        "SUPABASE_URL": "https://project.supabase.test",
        "SUPABASE_SERVICE_KEY": "svc",
    }
    values.update(overrides)
    return Settings(**values)


def test_default_backends():
    config = make_settings()
    assert isinstance(build_source(config), SensioApiClient)
    directory = build_directory(config)
    assert isinstance(directory, AllowlistDirectory)
    assert directory.serials == ["SA1", "SA2"]


def test_supabase_backends():
    config = make_settings(DATA_SOURCE="supabase", ACCESS_BACKEND="supabase")
    assert isinstance(build_source(config), SupabaseProxySource)
    assert isinstance(build_directory(config), SupabaseDeviceDirectory)


def test_database_backend(tmp_path):
    config = make_settings(ACCESS_BACKEND="database", DATABASE_URL=f"sqlite:///{tmp_path / 'd.db'}")
    assert isinstance(build_directory(config), SqlDeviceDirectory)


def test_dispatcher_takes_limits_from_settings():
    dispatcher = build_dispatcher(make_settings(MAX_TIME_WINDOW_DAYS=7, DEFAULT_TOP_K=3, SENSIO_USER_ID="u1"))
    assert dispatcher.caller_id == "u1"
    assert dispatcher.default_top_k == 3
    assert dispatcher.ctx.max_window_days == 7


def test_missing_api_key_fails_startup():
    with pytest.raises(RuntimeError, match="SENSIO_API_KEY"):
        build_dispatcher(make_settings(SENSIO_API_KEY=""))
