from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import HTMLResponse, JSONResponse
import logging

from cache import CollectionCache, FileCacheStore
from config import load_settings
from disc_service import DiscService
from dizzylab_client import DizzylabClient
from exceptions import InvalidArgument, UpstreamError
from models import Disc, ErrorResponse
from views import render_collection, render_error


logger = logging.getLogger(__name__)

settings = load_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Initialize FastAPI app
app = FastAPI(title="Disc Collection")

# Initialize components
dizzylab_client = DizzylabClient(base_url=settings.base_url, timeout=settings.http_timeout)
collection_cache = CollectionCache(
    FileCacheStore(settings.cache_dir), ttl_seconds=settings.cache_ttl_seconds
)
disc_service = DiscService(collection_cache, dizzylab_client, page_size=settings.page_size)

LISTING_CACHE_CONTROL = "public, max-age=300"


def get_disc_service() -> DiscService:
    return disc_service


def error_response(message: str, status_code: int) -> JSONResponse:
    response = JSONResponse(
        ErrorResponse(error=message).model_dump(), status_code=status_code
    )
    response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument):
    return error_response(str(exc), status.HTTP_400_BAD_REQUEST)


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    logger.error("Upstream request failed for %s: %s", request.url.path, exc)
    return error_response("upstream_unavailable", status.HTTP_502_BAD_GATEWAY)


@app.on_event("shutdown")
async def shutdown_event():
    """Release the upstream HTTP client"""
    await dizzylab_client.close()


@app.get("/api/healthz")
async def health_check():
    """Simple health check endpoint"""
    return {"status": "ok"}


@app.get("/api/discs/{account_id}")
async def api_list_discs(account_id: str, service: DiscService = Depends(get_disc_service)):
    """Return an account's disc collection"""
    discs = await service.list_discs(account_id)
    response = JSONResponse([disc.to_wire() for disc in discs])
    response.headers["Cache-Control"] = LISTING_CACHE_CONTROL
    return response


@app.get("/api/disc/")
@app.get("/api/disc")
async def api_disc_missing_id():
    """Disc lookups without an id"""
    raise InvalidArgument("Missing disc id")


@app.get("/api/disc/{item_id}")
async def api_get_disc(item_id: str, service: DiscService = Depends(get_disc_service)):
    """Return a single disc scraped from its detail page"""
    disc: Disc = await service.get_disc(item_id)
    response = JSONResponse(disc.to_wire())
    response.headers["Cache-Control"] = "no-store"
    return response


@app.get("/view/{account_id}", response_class=HTMLResponse)
async def view_collection(account_id: str, service: DiscService = Depends(get_disc_service)):
    """Render an account's collection as an HTML grid"""
    try:
        discs = await service.list_discs(account_id)
    except InvalidArgument as exc:
        return HTMLResponse(render_error(str(exc)), status_code=status.HTTP_400_BAD_REQUEST)
    except UpstreamError:
        logger.exception("Could not load collection for account %s", account_id)
        return HTMLResponse(
            render_error("The collection could not be loaded right now."),
            status_code=status.HTTP_502_BAD_GATEWAY,
        )
    return HTMLResponse(render_collection(discs))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000)
