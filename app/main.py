from fastapi import FastAPI, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, DisconnectionError
from typing import Optional
import math
import os
import time
import traceback
import logging
import uuid

from app.config.settings import get_settings
from app.models.schemas import (
    RestaurantResponse,
    SearchResponse,
    ErrorResponse,
    HealthResponse,
    ImageResult,
    ImagesResponse,
    MenuItem,
    MenuSection,
    ProcessingTime,
    ScanRequest,
    ScanResponse,
)
from app.services.database_service import RestaurantStore, DatabaseServiceError
from app.services.providers import get_search_providers
from app.services.restaurant_service import RestaurantResolver

app = FastAPI(
    title="Restaurant Resolver",
    description="Matches restaurant names to canonical records using a local cache and Yelp / Google Places",
    version="1.0.0"
)

# Configure logging
logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

MAX_TRENDING_LIMIT = 100
DEFAULT_MENU_NAME = "Standard Menu"


@app.on_event("startup")
async def startup_event():
    """Build the store, providers and resolver. A database we can't reach is fatal."""
    settings = get_settings()
    database_url = settings.require_database_url()

    store = RestaurantStore.from_url(database_url)
    if not await run_in_threadpool(store.check_connection):
        store.close()
        raise RuntimeError("Database connection failed at startup; refusing to serve traffic")
    try:
        await run_in_threadpool(store.create_schema)
    except DatabaseServiceError:
        store.close()
        raise

    primary, secondary = get_search_providers(settings)
    app.state.resolver = RestaurantResolver(
        store,
        primary,
        secondary,
        cache_search_limit=settings.cache_search_limit,
    )
    logger.info("Database initialised - restaurants table verified/created")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    resolver: Optional[RestaurantResolver] = getattr(app.state, "resolver", None)
    if resolver is not None:
        resolver.close()
        resolver.store.close()
    logger.info("Shutting down...")


@app.exception_handler(OperationalError)
@app.exception_handler(DisconnectionError)
async def database_exception_handler(request: Request, exc: Exception):
    """Handle database connection errors gracefully"""
    logger.error(f"Database error: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=503,
        content={"error": "Database connection error. Please try again in a moment."}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with detailed logging"""
    error_traceback = traceback.format_exc()
    logger.error(f"Unhandled exception: {str(exc)}\n{error_traceback}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )


def get_resolver(request: Request) -> RestaurantResolver:
    """Dependency returning the resolver built at startup."""
    return request.app.state.resolver


def finite_or_none(value: Optional[float]) -> Optional[float]:
    return value if value is not None and math.isfinite(value) else None


def parse_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return finite_or_none(float(value))
    except ValueError:
        return None


def parse_limit(value: Optional[str], default: int) -> int:
    try:
        limit = int(value) if value is not None else default
    except ValueError:
        limit = default
    return max(1, min(limit, MAX_TRENDING_LIMIT))


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.get("/health", response_model=HealthResponse)
async def health_check(resolver: RestaurantResolver = Depends(get_resolver)):
    """Health check endpoint that verifies database connectivity"""
    timestamp = int(time.time() * 1000)
    if await run_in_threadpool(resolver.store.check_connection):
        return HealthResponse(status="ok", database="connected", timestamp=timestamp)
    return JSONResponse(
        status_code=503,
        content=HealthResponse(status="unhealthy", database="disconnected", timestamp=timestamp).model_dump()
    )


@app.get(
    "/api/v1/restaurants/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}},
)
async def search_restaurants(
    q: Optional[str] = None,
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    resolver: RestaurantResolver = Depends(get_resolver),
):
    """
    Search restaurants by name or cuisine.

    Args:
        q: Search query (required)
        lat: Optional latitude to bias provider results
        lng: Optional longitude to bias provider results

    Returns:
        Matching restaurants, from the local cache or the external providers
    """
    if q is None or not q.strip():
        return error_response(400, "Query parameter 'q' is required")

    query = q.strip()
    latitude = parse_float(lat)
    longitude = parse_float(lng)
    logger.info(f"Restaurant search: q='{query}' lat={latitude} lng={longitude}")

    results = await resolver.search(query, latitude, longitude)

    logger.info(f"Search returned {len(results)} result(s) for '{query}'")
    return SearchResponse(results=[RestaurantResponse.from_record(r) for r in results])


@app.get("/api/v1/restaurants/trending", response_model=SearchResponse)
async def trending_restaurants(
    limit: Optional[str] = None,
    resolver: RestaurantResolver = Depends(get_resolver),
):
    """Top restaurants by rating."""
    results = await resolver.get_trending(parse_limit(limit, get_settings().trending_default_limit))
    return SearchResponse(results=[RestaurantResponse.from_record(r) for r in results])


@app.get(
    "/api/v1/restaurants/{restaurant_id}",
    response_model=RestaurantResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_restaurant(
    restaurant_id: str,
    resolver: RestaurantResolver = Depends(get_resolver),
):
    restaurant = await resolver.get_by_id(restaurant_id)
    if restaurant is None:
        return error_response(404, "Restaurant not found")
    return RestaurantResponse.from_record(restaurant)


@app.get(
    "/api/v1/restaurants/{restaurant_id}/images",
    response_model=ImagesResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_restaurant_images(
    restaurant_id: str,
    resolver: RestaurantResolver = Depends(get_resolver),
):
    """Stored photo of a restaurant, attributed to the provider it came from."""
    restaurant = await resolver.get_by_id(restaurant_id)
    if restaurant is None:
        return error_response(404, "Restaurant not found")

    images = []
    if restaurant.image_url.strip():
        images.append(ImageResult(
            url=restaurant.image_url,
            source="yelp" if restaurant.yelp_id is not None else "google_maps",
            uploaded_by="business_owner",
            uploaded_at=int(time.time() * 1000),
            relevance_score=1.0,
            thumbnail_url=restaurant.image_url,
        ))
    return ImagesResponse(restaurant_id=restaurant_id, images=images, total=len(images))


@app.post(
    "/api/v1/scans",
    response_model=ScanResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_scan(
    scan: ScanRequest,
    resolver: RestaurantResolver = Depends(get_resolver),
):
    """
    Identify the restaurant named in a mobile menu scan.

    The on-device restaurant name goes through the regular search pipeline
    and the best-ranked match is returned. Scans are not persisted.

    Args:
        scan: Scan payload from the device

    Returns:
        Scan envelope with the matched restaurant and timing breakdown
    """
    server_start = time.time()
    query = (scan.restaurant_name or "").strip()
    if not query:
        return error_response(400, "restaurantName is required for a scan")

    logger.info(f"Processing scan: restaurantName='{query}' quality={scan.image_quality_score}")

    results = await resolver.search(
        query,
        finite_or_none(scan.latitude),
        finite_or_none(scan.longitude),
    )
    if not results:
        return error_response(404, f"Could not identify a restaurant for: {query}")

    restaurant = results[0]
    server_ms = int((time.time() - server_start) * 1000)
    sections = scan.sections or [
        MenuSection(name="Items", items=[MenuItem(name="See menu for details")])
    ]

    response = ScanResponse(
        scan_id=f"scan_{uuid.uuid4().hex}",
        restaurant=RestaurantResponse.from_record(restaurant),
        menu_name=scan.menu_name or DEFAULT_MENU_NAME,
        sections=sections,
        images=[],
        processing_time=ProcessingTime(
            device_ms=scan.device_processing_time,
            server_ms=server_ms,
            total_ms=scan.device_processing_time + server_ms,
        ),
        quality_score=scan.image_quality_score,
    )
    logger.info(f"Scan complete: scanId={response.scan_id} restaurant='{restaurant.name}'")
    return response


@app.get(
    "/api/v1/scans/{scan_id}",
    responses={501: {"model": ErrorResponse}},
)
async def get_scan(scan_id: str):
    """Scans are not stored, so there is nothing to retrieve."""
    return error_response(501, f"Scan retrieval by ID ({scan_id}) is not supported")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
