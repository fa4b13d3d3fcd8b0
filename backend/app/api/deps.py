from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.security import InvalidToken, admin_id_from_token
from app.db.session import get_db
from app.models.user import User

bearer = HTTPBearer()


def get_current_admin(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    try:
        admin_id = admin_id_from_token(creds.credentials)
    except InvalidToken as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    admin = db.get(User, admin_id)
    if not admin:
        raise HTTPException(status_code=401, detail="Admin not found")
    if admin.status != "active":
        raise HTTPException(status_code=403, detail="Admin blocked")
    return admin
