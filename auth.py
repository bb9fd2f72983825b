# auth.py

import logging

from fastapi import APIRouter, Depends

from db import get_user_store
from exceptions import NotFound, Unauthorized
from models import UserLogin, Token
from store import UserStore
from utils.auth_utils import verify_password, create_access_token

logger = logging.getLogger(__name__)
auth_router = APIRouter()

# -----------------------------
# Routes
# -----------------------------

@auth_router.post("/login", response_model=Token)
def login(user: UserLogin, store: UserStore = Depends(get_user_store)):
    try:
        db_user = store.find_by_username(user.username)
    except NotFound:
        db_user = None
    if not db_user or not verify_password(user.password, db_user["password"]):
        logger.info("Failed login for %s", user.username)
        raise Unauthorized("Invalid credentials")
    token = create_access_token(db_user["username"])
    return {"access_token": token, "token_type": "bearer"}
