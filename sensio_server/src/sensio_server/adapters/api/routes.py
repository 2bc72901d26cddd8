# sensio_server/adapters/api/routes.py

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from sensio_core.application.dispatch import TOOL_NAMES, ToolDispatcher

from sensio_server.adapters.api.schemas import ToolCall, ToolList

router = APIRouter()


def get_dispatcher(request: Request) -> ToolDispatcher:
    return request.app.state.dispatcher


@router.get("/ping")
def ping():
    return {"status": "ok"}


@router.get("/tools", response_model=ToolList)
def tools():
    return ToolList(tools=list(TOOL_NAMES))


@router.post("/tools/{name}")
def call_tool(
    name: str,
    call: Optional[ToolCall] = None,
    x_user_id: Optional[str] = Header(default=None),
    dispatcher: ToolDispatcher = Depends(get_dispatcher),
):
    arguments = call.arguments if call else {}
    result = dispatcher.call(name, arguments, caller_id=x_user_id)
    if not result.is_error:
        return result.payload
    status = 404 if name not in TOOL_NAMES else 400
    return JSONResponse(result.payload, status_code=status)
