# models.py
from datetime import date
from pydantic import BaseModel
from typing import List, Optional

class UserIn(BaseModel):
    # Plain optional strings so that missing fields reach validate_user
    # and are reported together with the other violations.
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None
    birthday: Optional[date] = None

class UserOut(BaseModel):
    username: str
    email: Optional[str] = None
    birthday: Optional[date] = None
    favorite_movies: List[str] = []

class UserLogin(BaseModel):
    username: str
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str

class Message(BaseModel):
    message: str
