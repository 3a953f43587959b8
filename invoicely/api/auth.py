"""
Authentication API

Register, login and logout with a signed session cookie.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response

from invoicely.api.deps import get_database
from invoicely.core.auth import (
    CurrentUser,
    clear_session_cookie,
    create_session_token,
    get_current_user,
    hash_password,
    set_session_cookie,
    verify_password,
)
from invoicely.core.database import InvoicelyDB
from invoicely.models.requests import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": user["id"], "email": user["email"], "name": user.get("name")}


@router.post("/register")
async def register(request: RegisterRequest, response: Response, db: InvoicelyDB = Depends(get_database)):
    if db.get_user_by_email(request.email):
        raise HTTPException(status_code=400, detail="User already exists")

    user = db.create_user(request.email, hash_password(request.password), request.name)
    set_session_cookie(response, create_session_token(user["id"], user["email"], user.get("name")))
    logger.info("Registered user %s", user["id"])
    return {"user": _public_user(user)}


@router.post("/login")
async def login(request: LoginRequest, response: Response, db: InvoicelyDB = Depends(get_database)):
    user = db.get_user_by_email(request.email)
    if not user or not verify_password(request.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_session_token(user["id"], user["email"], user.get("name"))
    set_session_cookie(response, token)
    return {"user": _public_user(user), "access_token": token, "token_type": "bearer"}


@router.post("/logout")
async def logout(response: Response):
    clear_session_cookie(response)
    return {"success": True}


@router.get("/me")
async def me(user: CurrentUser = Depends(get_current_user)):
    return {"user": user.model_dump()}
