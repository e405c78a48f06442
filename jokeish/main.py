"""API endpoints for Jokeish."""

import logging
import re
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import APIRouter, Depends, FastAPI, Header, Request, Response, status
from fastapi.responses import PlainTextResponse

from . import __version__, auth, jwks
from .config import Settings
from .jokes import JokeNotFoundError, JokeStore
from .models import Joke, PingResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ASCII digits with optional sign, no whitespace or underscores
JOKE_ID = re.compile(r"[+-]?[0-9]+")


# Load settings, jokes and key resolver only once on app startup
# See https://fastapi.tiangolo.com/advanced/events/
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()  # type: ignore[call-arg]
    app.state.settings = settings

    if settings.jokes_path:
        app.state.jokes = JokeStore.from_yaml_file(settings.jokes_path)
        logger.info(f"Loaded jokes from {settings.jokes_path}")
    else:
        app.state.jokes = JokeStore.default()
        logger.info("Loaded built-in jokes")

    app.state.key_resolver = jwks.KeyResolver(
        settings.auth0_domain,
        timeout=settings.jwks_timeout,
        cache_ttl=settings.jwks_cache_ttl,
    )
    yield


app = FastAPI(
    title="Jokeish",
    description="A load of dad jokes, for authenticated users only",
    version=__version__,
    lifespan=lifespan,
)
logger.info("Jokeish application initialized successfully")


class Unauthorized(Exception):
    """Raised when a request carries no valid bearer token."""


@app.exception_handler(Unauthorized)
async def unauthorized_handler(request: Request, exc: Unauthorized):
    """Return 401 without disclosing the reason"""
    return PlainTextResponse(
        "Unauthorized",
        status_code=status.HTTP_401_UNAUTHORIZED,
        headers={"WWW-Authenticate": "Bearer"},
    )


def authenticate(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> dict[str, Any]:
    """Validate bearer token and return its verified claims."""
    token = auth.bearer_token(authorization)
    if token is None:
        logger.warning("Missing or malformed Authorization header")
        raise Unauthorized()

    settings: Settings = request.app.state.settings
    try:
        return auth.validate_token(
            token,
            settings.auth0_api_audience,
            settings.auth0_domain,
            key_resolver=request.app.state.key_resolver,
        )
    except (auth.TokenVerificationError, jwks.KeyResolutionError) as e:
        logger.warning(f"Token verification failed: {type(e).__name__}: {e}")
        raise Unauthorized() from e


Claims = Annotated[dict[str, Any], Depends(authenticate)]

api = APIRouter(prefix="/api")


@api.get("/", response_model=PingResponse)
def ping():
    """Health check, no authentication required."""
    return PingResponse()


@api.get("/jokes", response_model=list[Joke])
def list_jokes(request: Request, claims: Claims):
    """List all jokes."""
    store: JokeStore = request.app.state.jokes
    return store.list_jokes()


@api.post("/jokes/like/{joke_id}", response_model=list[Joke])
def like_joke(joke_id: str, request: Request, claims: Claims):
    """Like a joke, 404 if joke_id is no integer or unknown."""
    store: JokeStore = request.app.state.jokes

    if not JOKE_ID.fullmatch(joke_id):
        logger.info(f"Invalid joke id: {joke_id!r}")
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    try:
        jokes = store.like_joke(int(joke_id))
    except JokeNotFoundError:
        logger.info(f"Unknown joke id: {joke_id}")
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    logger.info(f"Joke {joke_id} liked by {claims.get('sub')}")
    return jokes


app.include_router(api)
