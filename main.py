import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

from auth import AuthService, Identity, bearer_token, current_identity
from config import Settings, configure_logging, load_settings
from database import connect, ensure_indexes, status_report
from errors import AuthError, CatalogError, Unauthorized
from schemas import Credentials, Product, ProductUpdate, TokenResponse
from stores import ProductStore, UserStore

logger = logging.getLogger(__name__)

PRODUCTS_PREFIX = "/products"


def get_products(request: Request) -> ProductStore:
    return request.app.state.products


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the API with its stores and auth service wired from ``settings``."""
    settings = settings or load_settings()
    if database is None:
        database = connect(settings)
    ensure_indexes(database)

    app = FastAPI(title="Product Catalog Backend", version="1.0.0")
    app.state.settings = settings
    app.state.db = database
    app.state.products = ProductStore(database)
    app.state.auth = AuthService(UserStore(database), settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app, settings)
    app.include_router(auth_routes())
    app.include_router(product_routes())
    return app


def _error_response(exc: CatalogError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(CatalogError)
    async def catalog_error(request: Request, exc: CatalogError):
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        # body parsing runs before the token dependency on gated routes
        if request.url.path.startswith(PRODUCTS_PREFIX):
            try:
                request.app.state.auth.verify(bearer_token(request))
            except AuthError as auth_exc:
                return _error_response(auth_exc)
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(PyMongoError)
    async def store_error(request: Request, exc: PyMongoError):
        logger.exception("Store failure on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "message": "Something went wrong",
                "error": {} if settings.is_production else str(exc),
            },
        )


def auth_routes():
    router = APIRouter()

    @router.get("/", response_class=PlainTextResponse)
    def read_root():
        return "Welcome to the Backend Server for the product catalog"

    @router.get("/test")
    def test_database(request: Request):
        return status_report(request.app.state.db, request.app.state.settings)

    @router.post("/signup", status_code=201, response_class=PlainTextResponse)
    def signup(body: Credentials, request: Request):
        request.app.state.auth.signup(body.email, body.password)
        return "User registered successfully"

    @router.post("/login", response_model=TokenResponse, response_model_by_alias=True)
    def login(body: Credentials, request: Request):
        token = request.app.state.auth.login(body.email, body.password)
        return TokenResponse(access_token=token)

    return router


# -------- Products --------
def product_routes():
    router = APIRouter(prefix=PRODUCTS_PREFIX, dependencies=[Depends(current_identity)])

    @router.post("", status_code=201)
    def create_product(product: Product, store: ProductStore = Depends(get_products)):
        return store.create(product)

    @router.get("")
    def list_products(store: ProductStore = Depends(get_products)) -> List[dict]:
        return store.list()

    @router.get("/featured")
    def featured_products(store: ProductStore = Depends(get_products)) -> List[dict]:
        return store.featured()

    @router.get("/price/{max_price}")
    def products_by_price(max_price: float, store: ProductStore = Depends(get_products)) -> List[dict]:
        return store.price_below(max_price)

    @router.get("/rating/{min_rating}")
    def products_by_rating(min_rating: float, store: ProductStore = Depends(get_products)) -> List[dict]:
        return store.rating_above(min_rating)

    @router.put("/{product_id}")
    def update_product(
        product_id: str,
        update: ProductUpdate,
        identity: Identity = Depends(current_identity),
        store: ProductStore = Depends(get_products),
    ):
        logger.debug("%s updating product %s", identity.email, product_id)
        return store.update(product_id, update)

    @router.delete("/{product_id}", response_class=PlainTextResponse)
    def delete_product(product_id: str, store: ProductStore = Depends(get_products)):
        store.delete(product_id)
        return "Product deleted"

    return router


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    settings = load_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
