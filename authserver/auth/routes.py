from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, EmailStr, Field
from pymongo.errors import DuplicateKeyError
from uuid import uuid4

from authserver.deps import get_db, get_current_user
from authserver.users import crud as users_crud
from authserver.auth.password import hash_password, verify_password
from authserver.auth.jwt_handler import create_access_token
from authserver.utils.rate_limit import limiter, per_minute
from authserver.utils.response import success
from authserver.utils.errors import AuthError, BadRequestError

router = APIRouter()

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str | None = Field(default=None, max_length=100)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

def _normalize_email(email: str) -> str:
    return str(email).strip().lower()

@router.post("/signup")
@limiter.limit(per_minute())
async def signup(request: Request, payload: SignupRequest, db = Depends(get_db)):
    email = _normalize_email(payload.email)

    # Same message for both paths so signup can't be used to enumerate accounts
    if await users_crud.get_by_email(db, email):
        raise BadRequestError("Email not available")

    user_id = str(uuid4())
    full_name = payload.full_name.strip() if payload.full_name else None
    try:
        await users_crud.insert_user(db, user_id, email, hash_password(payload.password), full_name=full_name)
    except DuplicateKeyError:
        # lost a race with a concurrent signup (uniq_email index)
        raise BadRequestError("Email not available")

    token = create_access_token(subject=user_id, extra_claims={"email": email})
    return success({"token": token}, status_code=201)

@router.post("/login")
@limiter.limit(per_minute(2))
async def login(request: Request, payload: LoginRequest, db = Depends(get_db)):
    email = _normalize_email(payload.email)
    user = await users_crud.get_by_email(db, email)
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        raise AuthError("Invalid credentials")

    token = create_access_token(subject=user["_id"], extra_claims={"email": email})
    return success({"token": token, "profile": users_crud.public_profile(user)})

@router.get("/me")
async def me(current_user = Depends(get_current_user)):
    return success(users_crud.public_profile(current_user))
