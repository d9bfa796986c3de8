from typing import Annotated, Optional

from fastapi import Depends, HTTPException
from jose import jwt, JWTError
from starlette import status
from fastapi.security import OAuth2PasswordBearer

from api.dependencies.database import DbSessionDep
from core.config import settings
from db.crud.user import UsersCrud
from db.tables.user import UserRole
from schemas.user import OutUserSchema

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


async def _user_from_token(db, token: str):
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    email = payload.get("sub")
    if email is None:
        return None
    return await UsersCrud(db).get_by_email(email=email)


async def get_current_user(
    db: DbSessionDep,
    token: str = Depends(oauth2_scheme),
) -> OutUserSchema:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user = await _user_from_token(db, token)
    if user is None:
        raise credentials_exception
    return OutUserSchema.model_validate(user)


async def get_optional_user(
    db: DbSessionDep,
    token: Optional[str] = Depends(optional_oauth2_scheme),
) -> Optional[OutUserSchema]:
    """The caller if a valid bearer token was sent, otherwise ``None``."""
    if not token:
        return None
    user = await _user_from_token(db, token)
    if user is None or not user.is_active:
        return None
    return OutUserSchema.model_validate(user)


async def get_current_active_user(current_user: OutUserSchema = Depends(get_current_user)) -> OutUserSchema:
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user


GetActiveUserDep = Annotated[OutUserSchema, Depends(get_current_active_user)]
OptionalUserDep = Annotated[Optional[OutUserSchema], Depends(get_optional_user)]


def require_applicant_role(current_user: OutUserSchema = Depends(get_current_active_user)) -> OutUserSchema:
    """Require user to be an applicant."""
    if current_user.role != UserRole.APPLICANT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only applicants can perform this action"
        )
    return current_user


def require_employer_role(current_user: OutUserSchema = Depends(get_current_active_user)) -> OutUserSchema:
    """Require user to be an employer."""
    if current_user.role != UserRole.EMPLOYER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only employers can perform this action"
        )
    return current_user


ApplicantDep = Annotated[OutUserSchema, Depends(require_applicant_role)]
EmployerDep = Annotated[OutUserSchema, Depends(require_employer_role)]
