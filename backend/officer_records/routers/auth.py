from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Request, Response
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
import logging

from ..settings import settings
from ..db import get_store
from ..store import CREDENTIALS, REFRESH_TOKENS, RecordStore, WriteOp

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

REFRESH_COOKIE = "refreshToken"


class Credentials(BaseModel):
	email: str
	password: str


class User(BaseModel):
	id: str
	email: str
	role: Optional[str] = None


def _bcrypt_safe(password: str) -> str:
	# bcrypt only looks at the first 72 bytes
	password_bytes = password.encode('utf-8')
	if len(password_bytes) > 72:
		password_bytes = password_bytes[:72]
	return password_bytes.decode('utf-8', errors='ignore')


def hash_password(password: str) -> str:
	return pwd_context.hash(_bcrypt_safe(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(_bcrypt_safe(plain_password), hashed_password)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
	expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
	to_encode = {"sub": user.id, "email": user.email, "role": user.role, "exp": expire}
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(store: RecordStore, user_id: str) -> str:
	expire = datetime.now(timezone.utc) + timedelta(days=settings.refresh_token_expire_days)
	token = jwt.encode({"uid": user_id, "exp": expire}, settings.refresh_secret_key, algorithm=settings.jwt_algorithm)
	# One refresh token per user: logging in again replaces the old one
	store.batch_write([WriteOp(REFRESH_TOKENS, "set", user_id, {"token": token, "expiresAt": expire.isoformat()})])
	return token


def _user_from_credential(doc_id: str, data: dict) -> User:
	return User(id=data.get("id") or doc_id, email=data["email"], role=data.get("role"))


def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> User:
	if not token:
		raise HTTPException(status_code=401, detail="No token provided")
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise HTTPException(status_code=403, detail="Invalid or expired token")
	user_id = payload.get("sub")
	email = payload.get("email")
	if user_id is None or email is None:
		raise HTTPException(status_code=403, detail="Invalid or expired token")
	return User(id=user_id, email=email, role=payload.get("role"))


def require_user(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[User]:
	if not settings.require_auth:
		return None
	return get_current_user(token)


@router.post("/create", status_code=201)
def create_user(req: Credentials, store: RecordStore = Depends(get_store)):
	email = req.email.strip()
	if not email or not req.password:
		raise HTTPException(status_code=400, detail="Email and password required")
	if store.query(CREDENTIALS, {"email": email}, limit=1):
		raise HTTPException(status_code=409, detail="User already exists")
	store.add(CREDENTIALS, {"email": email, "password": hash_password(req.password)})
	return {"message": "User created successfully"}


@router.post("/login")
def login(req: Credentials, response: Response, store: RecordStore = Depends(get_store)):
	if not req.email or not req.password:
		raise HTTPException(status_code=400, detail="Email and password required")
	found = store.query(CREDENTIALS, {"email": req.email.strip()}, limit=1)
	if not found or not verify_password(req.password, found[0].get("password", "")):
		raise HTTPException(status_code=401, detail="Invalid credentials")
	doc = found[0]
	user = _user_from_credential(doc.id, doc.data)
	access_token = create_access_token(user)
	refresh_token = create_refresh_token(store, doc.id)
	response.set_cookie(
		REFRESH_COOKIE,
		refresh_token,
		httponly=True,
		secure=settings.secure_cookies,
		samesite="strict",
		max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
	)
	return {
		"role": user.role,
		"id": user.id,
		"accessToken": access_token,
		"expiresIn": f"{settings.access_token_expire_minutes}m",
		"message": "Login successful",
	}


@router.post("/refresh")
def refresh(request: Request, store: RecordStore = Depends(get_store)):
	token = request.cookies.get(REFRESH_COOKIE)
	if not token:
		raise HTTPException(status_code=401, detail="No refresh token")
	try:
		jwt.decode(token, settings.refresh_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise HTTPException(status_code=401, detail="Invalid or expired refresh token")
	stored = store.query(REFRESH_TOKENS, {"token": token}, limit=1)
	if not stored:
		raise HTTPException(status_code=401, detail="Invalid refresh token")
	credential = store.get(CREDENTIALS, stored[0].id)
	if credential is None:
		raise HTTPException(status_code=401, detail="Invalid refresh token")
	user = _user_from_credential(credential.id, credential.data)
	return {"accessToken": create_access_token(user)}


@router.post("/logout")
def logout(request: Request, response: Response, store: RecordStore = Depends(get_store)):
	token = request.cookies.get(REFRESH_COOKIE)
	if not token:
		raise HTTPException(status_code=400, detail="No refresh token provided")
	try:
		payload = jwt.decode(token, settings.refresh_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise HTTPException(status_code=400, detail="Invalid token")
	user_id = payload.get("uid")
	if user_id:
		store.delete(REFRESH_TOKENS, user_id)
	response.delete_cookie(REFRESH_COOKIE)
	return {"message": "Logged out successfully"}


@router.get("/me", response_model=User)
def me(user: User = Depends(get_current_user)):
	return user
