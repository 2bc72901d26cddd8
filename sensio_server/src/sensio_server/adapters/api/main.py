from fastapi import FastAPI
from sensio_core.application.dispatch import ToolDispatcher

from sensio_server.adapters.api.routes import router


def create_app(dispatcher: ToolDispatcher) -> FastAPI:
    app = FastAPI(title="sensio-air")
    app.state.dispatcher = dispatcher
    app.include_router(router)
    return app


def create_app_from_settings() -> FastAPI:
    """App factory for ``uvicorn --factory``."""
    from sensio_core.config.environments import get_settings

    from sensio_server.bootstrap import build_dispatcher

    return create_app(build_dispatcher(get_settings()))
