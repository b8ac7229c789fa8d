from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from app.core.security import decode_token
from app.services.reports.storage import ReportStorage, SqlAlchemyReportStorage

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)

ROLE_PERMISSIONS: dict[str, set[str]] = {
    "admin": {"reports:view"},
    "manager": {"reports:view"},
    "cashier": set(),
}


@dataclass(frozen=True)
class TokenUser:
    subject: str
    role: str


def get_current_user(request: Request, token: str | None = Depends(oauth2_scheme)) -> TokenUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    raw_token = (token or "").strip().strip("\"'").strip()
    if not raw_token:
        raw_token = (request.cookies.get("access_token") or "").strip()
    if not raw_token:
        raise credentials_exception

    try:
        payload = decode_token(raw_token)
    except JWTError:
        raise credentials_exception

    subject = payload.get("sub")
    if subject is None or payload.get("type") != "access":
        raise credentials_exception
    return TokenUser(subject=str(subject), role=str(payload.get("role") or ""))


def require_permission(permission: str):
    def checker(current_user: TokenUser = Depends(get_current_user)) -> TokenUser:
        permissions = ROLE_PERMISSIONS.get(current_user.role, set())
        if permission not in permissions:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission required: {permission}",
            )
        return current_user

    return checker


def get_report_storage() -> ReportStorage:
    return SqlAlchemyReportStorage()
