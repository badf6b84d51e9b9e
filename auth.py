import json
import hmac
import base64
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

import config
from database import get_db, now, serialize, to_object_id

# Simple JWT (HS256); the session row is the source of truth for validity


def _b64url_encode(b: bytes) -> str:
    return base64.urlsafe_b64encode(b).rstrip(b"=").decode()


def _b64url_decode(s: str) -> bytes:
    pad = '=' * (-len(s) % 4)
    return base64.urlsafe_b64decode(s + pad)


def jwt_encode(payload: dict, secret: str) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64url_encode(json.dumps(header, separators=(',', ':')).encode())
    payload_b64 = _b64url_encode(json.dumps(payload, default=str, separators=(',', ':')).encode())
    signing_input = f"{header_b64}.{payload_b64}".encode()
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{_b64url_encode(signature)}"


def jwt_decode(token: str, secret: str) -> dict:
    try:
        header_b64, payload_b64, sig_b64 = token.split('.')
    except ValueError:
        raise ValueError("Malformed token")
    signing_input = f"{header_b64}.{payload_b64}".encode()
    expected_sig = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    if not hmac.compare_digest(_b64url_encode(expected_sig), sig_b64):
        raise ValueError("Invalid signature")
    try:
        payload = json.loads(_b64url_decode(payload_b64))
    except (ValueError, UnicodeDecodeError):
        raise ValueError("Malformed payload")
    if 'exp' in payload:
        exp = datetime.fromtimestamp(payload['exp'], tz=timezone.utc)
        if datetime.now(timezone.utc) > exp:
            raise ValueError("Token expired")
    return payload


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        return False


def open_session(db, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Creates a session row for the user and returns a signed access token"""
    expires_delta = expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    started = now()
    res = db["session"].insert_one({
        "user_id": user_id,
        "created_at": started,
        "expires_at": started + expires_delta,
    })
    expire = datetime.now(timezone.utc) + expires_delta
    payload = {"sub": user_id, "sid": str(res.inserted_id), "exp": int(expire.timestamp())}
    return jwt_encode(payload, config.JWT_SECRET)


def close_session(db, session_id: str) -> None:
    oid = to_object_id(session_id)
    if oid is not None:
        db["session"].delete_one({"_id": oid})


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def _resolve_user(db, token: Optional[str]) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    try:
        payload = jwt_decode(token, config.JWT_SECRET)
    except ValueError:
        return None
    user_oid = to_object_id(payload.get("sub"))
    session_oid = to_object_id(payload.get("sid"))
    if user_oid is None or session_oid is None:
        return None
    session = db["session"].find_one({"_id": session_oid, "user_id": str(user_oid)})
    if not session or session["expires_at"] < now():
        return None
    profile = db["profile"].find_one({"_id": user_oid})
    if not profile:
        return None
    user = serialize(profile)
    user["session_id"] = str(session_oid)
    return user


# Dependencies
def get_optional_user(token: Optional[str] = Depends(oauth2_scheme), db=Depends(get_db)) -> Optional[Dict[str, Any]]:
    return _resolve_user(db, token)


def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db=Depends(get_db)) -> Dict[str, Any]:
    user = _resolve_user(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def is_admin(user: Optional[Dict[str, Any]]) -> bool:
    return bool(user) and user.get("role") == "admin"


def require_admin(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Sends non-admin sessions back to the home view"""
    if not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            detail="Access denied. Admin privileges required.",
            headers={"Location": "/"},
        )
    return current_user
