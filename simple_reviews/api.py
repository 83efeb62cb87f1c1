# simple_reviews/api.py
# HTTP surface: mock sentiment routes, generic content API and shortcode rendering

from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import ReviewsConfig
from .core import analyze_sentiment, get_review_history, get_review_outliers
from .registry import ContentTypeRegistry, init_plugin
from .schemas import PostOut, ReviewSummary, SentimentResult
from .security import NotFoundException, ReviewsException, log_event, setup_logging, utc_timestamp
from .shortcodes import ShortcodeRegistry
from .storage import Post, ReviewStore


# ============================================================================
# UTILITIES
# ============================================================================

def get_client_identifier(request: Request) -> str:
    """Get client identifier for event logs"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def create_error_response(status_code: int, message: str, error_code: str) -> JSONResponse:
    """Create standardized error response"""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": error_code,
                "message": message,
                "status": status_code,
                "timestamp": utc_timestamp(),
            }
        },
    )


async def get_json_params(request: Request) -> Dict[str, Any]:
    """Request body as a dict; empty, malformed or non-object bodies give {}"""
    try:
        params = await request.json()
    except ValueError:
        return {}
    return params if isinstance(params, dict) else {}


def get_store(request: Request) -> ReviewStore:
    return request.app.state.store


def post_to_dict(store: ReviewStore, post: Post) -> Dict[str, Any]:
    return {
        "id": post.id,
        "type": post.post_type,
        "date": post.created_at,
        "title": post.title,
        "content": post.content,
        "meta": store.get_all_post_meta(post.id),
    }


# ============================================================================
# MOCK SENTIMENT API
# ============================================================================

router = APIRouter(prefix=f"/{ReviewsConfig.REST_NAMESPACE}", tags=["sentiment"])


@router.post("/sentiment/", response_model=SentimentResult)
async def sentiment_endpoint(request: Request) -> Dict[str, Any]:
    """Mock sentiment analysis for {"text": "..."}"""
    params = await get_json_params(request)
    result = analyze_sentiment(params.get("text"))

    log_event("sentiment_analyzed", {
        "client": get_client_identifier(request),
        "sentiment": result["sentiment"],
    })
    return result


@router.get("/review-history/", response_model=List[ReviewSummary])
def review_history_endpoint(store: ReviewStore = Depends(get_store)) -> List[Dict[str, Any]]:
    """The five most recent reviews with stored sentiment"""
    history = get_review_history(store)
    log_event("review_history_served", {"count": len(history), "severity": "debug"})
    return history


@router.get("/outliers/", response_model=List[ReviewSummary])
def outliers_endpoint(store: ReviewStore = Depends(get_store)) -> List[Dict[str, Any]]:
    """Recent reviews whose stored score is outside the neutral band"""
    outliers = get_review_outliers(store)
    log_event("review_outliers_served", {"count": len(outliers), "severity": "debug"})
    return outliers


# ============================================================================
# CONTENT API
# ============================================================================

content_router = APIRouter(prefix=f"/{ReviewsConfig.CONTENT_NAMESPACE}", tags=["content"])


def resolve_rest_type(request: Request, rest_base: str):
    post_type = request.app.state.content_types.by_rest_base(rest_base)
    if post_type is None:
        raise NotFoundException(f"No route for content type: {rest_base}", "not_found",
                                {"rest_base": rest_base})
    return post_type


@content_router.get("/{rest_base}", response_model=List[PostOut])
def list_content(rest_base: str, request: Request,
                 store: ReviewStore = Depends(get_store)) -> List[Dict[str, Any]]:
    """Newest records of a REST-enabled type, one fixed-size page"""
    post_type = resolve_rest_type(request, rest_base)
    posts = store.get_posts(post_type=post_type.name, limit=ReviewsConfig.CONTENT_PAGE_SIZE)
    return [post_to_dict(store, post) for post in posts]


@content_router.get("/{rest_base}/{post_id}", response_model=PostOut)
def get_content(rest_base: str, post_id: int, request: Request,
                store: ReviewStore = Depends(get_store)) -> Dict[str, Any]:
    post_type = resolve_rest_type(request, rest_base)
    post = store.get_post(post_id)
    if post is None or post.post_type != post_type.name or post.status != "publish":
        raise NotFoundException("Invalid post ID.", "not_found", {"post_id": post_id})
    return post_to_dict(store, post)


# ============================================================================
# APPLICATION
# ============================================================================

def create_app(store: ReviewStore = None, config=ReviewsConfig) -> FastAPI:
    """Build the application; plugin initialization runs in the lifespan"""
    setup_logging(level=config.LOG_LEVEL, log_dir=config.LOG_DIR)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_plugin(app.state)
        log_event("api_startup", {"version": __version__, "database": _safe_url(app.state.store)})
        yield
        app.state.store.dispose()
        log_event("api_shutdown", {"version": __version__})

    app = FastAPI(
        title="Simple Reviews API",
        description="Product review records with mock sentiment endpoints",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.store = store or ReviewStore(config.DATABASE_URL)
    app.state.content_types = ContentTypeRegistry()
    app.state.shortcodes = ShortcodeRegistry()

    # ------------------------------------------------------------------
    # exception handlers
    # ------------------------------------------------------------------

    @app.exception_handler(ReviewsException)
    async def reviews_exception_handler(request: Request, exc: ReviewsException):
        log_event("request_rejected", {
            "path": str(request.url),
            "client": get_client_identifier(request),
            "error_code": exc.error_code,
            "message": exc.message,
            "severity": "low",
        })
        return create_error_response(exc.status_code, exc.message, exc.error_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        error_code = "not_found" if exc.status_code == 404 else "http_error"
        return create_error_response(exc.status_code, str(exc.detail), error_code)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        log_event("unhandled_exception", {
            "path": str(request.url),
            "client": get_client_identifier(request),
            "error": str(exc),
            "severity": "high",
        })
        return create_error_response(500, "An error occurred. Please try again later.", "internal_error")

    # ------------------------------------------------------------------
    # routes
    # ------------------------------------------------------------------

    @app.get("/")
    async def root() -> Dict[str, str]:
        """Health check"""
        return {
            "message": "Simple Reviews API",
            "version": __version__,
            "status": "operational",
        }

    @app.get("/health")
    async def health_check() -> Dict[str, Any]:
        """Detailed health check"""
        return {
            "status": "healthy",
            "post_types": [t.name for t in app.state.content_types.rest_types()],
            "shortcodes": app.state.shortcodes.tags(),
            "render_mode": config.RENDER_MODE,
        }

    @app.get("/shortcodes/{tag}", response_class=HTMLResponse)
    def render_shortcode(tag: str) -> HTMLResponse:
        """Render a registered shortcode as an HTML fragment"""
        return HTMLResponse(app.state.shortcodes.render(tag))

    app.include_router(router)
    app.include_router(content_router)

    return app


def _safe_url(store: ReviewStore) -> str:
    return store.engine.url.render_as_string(hide_password=True)


app = create_app()


def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run(app, host=ReviewsConfig.HOST, port=ReviewsConfig.PORT, log_config=None)


if __name__ == "__main__":
    run()
