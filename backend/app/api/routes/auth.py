from fastapi import APIRouter, Depends, HTTPException
import sqlalchemy as sa
from sqlalchemy.orm import Session

from app.api.deps import get_current_admin
from app.core.security import create_access_token, now_utc, verify_password
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import AdminOut, LoginIn, TokenOut
from app.services.audit import audit

router = APIRouter()

@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    username = payload.username.strip()
    user = db.execute(sa.select(User).where(User.username == username)).scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(401, "Invalid credentials")
    if user.status != "active":
        raise HTTPException(403, "User blocked")

    user.last_login_at = now_utc()
    audit(db, user.id, "auth", user.id, "login", {})
    db.commit()

    return TokenOut(access_token=create_access_token(user.id))

@router.get("/me", response_model=AdminOut)
def me(current=Depends(get_current_admin)):
    return AdminOut(id=current.id, username=current.username, status=current.status)
