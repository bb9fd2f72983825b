import logging
import time
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Query, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import auth_router
from catalog import MovieCatalog
from config import CORS_ORIGINS, HOST, PORT
from db import get_user_store, get_movie_catalog, init_db
from exceptions import AppError, ValidationError
from logging_config import setup_logging
from models import UserIn, UserOut, Message
from store import UserStore
from utils.auth_utils import hash_password, get_current_user, get_authorized_user
from validation import validate_user

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="🎬 myFlix Movie API",
    description="Movie catalog with user accounts and favorite movies",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)


# -------------------------------
# Logging & error handling
# -------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        client = request.client.host if request.client else "-"
        logger.info('%s "%s %s" %s %.1fms', client, request.method, request.url.path, status_code, elapsed_ms)

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]) or "body", "message": err["msg"]}
        for err in exc.errors()
    ]
    error = ValidationError(errors)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "INTERNAL_ERROR", "message": "Internal server error"})


def _validated(user: UserIn) -> dict:
    fields = user.model_dump()
    violations = validate_user(fields)
    if violations:
        raise ValidationError(violations)
    fields["password"] = hash_password(fields["password"])
    return fields

# -------------------------------
# Movie Routes
# -------------------------------

@app.get("/")
def root():
    return {"message": "Welcome to my Movie App!"}

@app.get("/movies")
def get_all_movies(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: str = Depends(get_current_user),
    catalog: MovieCatalog = Depends(get_movie_catalog)
):
    return catalog.list_movies(page, page_size)

@app.get("/movies/genres/{name}")
def get_genre(name: str, current_user: str = Depends(get_current_user), catalog: MovieCatalog = Depends(get_movie_catalog)):
    return catalog.find_genre(name)

@app.get("/movies/directors/{name}")
def get_director(name: str, current_user: str = Depends(get_current_user), catalog: MovieCatalog = Depends(get_movie_catalog)):
    return catalog.find_director(name)

@app.get("/movies/{title}")
def get_movie(title: str, current_user: str = Depends(get_current_user), catalog: MovieCatalog = Depends(get_movie_catalog)):
    return catalog.find_by_title(title)

# -------------------------------
# User Routes
# -------------------------------

@app.get("/users", response_model=List[UserOut])
def get_users(current_user: str = Depends(get_current_user), store: UserStore = Depends(get_user_store)):
    return store.list_users()

@app.get("/users/{username}", response_model=UserOut)
def get_user(username: str, current_user: str = Depends(get_current_user), store: UserStore = Depends(get_user_store)):
    return store.find_by_username(username)

@app.post("/users", response_model=UserOut, status_code=201)
def register(user: UserIn, store: UserStore = Depends(get_user_store)):
    return store.create(_validated(user))

@app.put("/users/{username}", response_model=UserOut)
def update_user(
    username: str,
    user: UserIn,
    current_user: str = Depends(get_authorized_user),
    store: UserStore = Depends(get_user_store)
):
    return store.update_fields(username, _validated(user))

@app.post("/users/{username}/movies/{movie_id}", response_model=UserOut)
def add_favorite(
    username: str,
    movie_id: str,
    current_user: str = Depends(get_authorized_user),
    store: UserStore = Depends(get_user_store)
):
    return store.add_favorite(username, movie_id)

@app.delete("/users/{username}/movies/{movie_id}", response_model=UserOut)
def remove_favorite(
    username: str,
    movie_id: str,
    current_user: str = Depends(get_authorized_user),
    store: UserStore = Depends(get_user_store)
):
    return store.remove_favorite(username, movie_id)

@app.delete("/users/{username}", response_model=Message)
def delete_user(username: str, current_user: str = Depends(get_authorized_user), store: UserStore = Depends(get_user_store)):
    store.delete(username)
    return {"message": f"{username} was deleted."}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
