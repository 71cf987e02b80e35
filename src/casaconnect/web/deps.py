from typing import Annotated, Any, cast

from fastapi import Depends, Request

from casaconnect.app import App
from casaconnect.core.modules.user.models import User
from casaconnect.errors import AuthenticationError


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_session(request: Request) -> dict[str, Any]:
    return cast(dict[str, Any], request.session)


async def load_session_user(request: Request, app: Annotated[App, Depends(get_app)]) -> None:
    """Validate the session user and enforce the role area of the requested path.

    Runs for every API request. The validated user, if any, is kept on
    request.state for the handlers.
    """
    request.state.user = await app.validate_session(request.session)
    app.ensure_area(request.session, request.url.path)


async def get_current_user(request: Request, _: Annotated[None, Depends(load_session_user)]) -> User:
    user = cast(User | None, getattr(request.state, "user", None))
    if user is None:
        raise AuthenticationError
    return user


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
SessionDep = Annotated[dict[str, Any], Depends(get_session)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
