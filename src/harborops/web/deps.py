from typing import Annotated, cast

from fastapi import Depends, Header, Request

from harborops.app import App
from harborops.errors import AuthenticationError


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_current_user_id(x_user_id: Annotated[str | None, Header(description="Caller's user id")] = None) -> str:
    """Read the caller identity set by the authenticating gateway."""
    if x_user_id is None or not x_user_id.strip():
        raise AuthenticationError("Missing X-User-Id header")
    return x_user_id.strip()


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
CurrentUserDep = Annotated[str, Depends(get_current_user_id)]
