import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from api.dependencies.database import DbSessionDep
from api.dependencies.user import GetActiveUserDep
from core.security import create_access_token, get_password_hash, verify_password
from db.crud.user import UsersCrud
from schemas.user import UserRegistrationSchema, OutUserSchema

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


class Token(BaseModel):
    access_token: str
    token_type: str


@router.post("/register", response_model=OutUserSchema, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegistrationSchema, db: DbSessionDep):
    """Register a new applicant or employer."""
    user_crud = UsersCrud(db)

    # Check if user already exists
    existing_user = await user_crud.get_by_email(user_data.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    values = user_data.model_dump(exclude={"password"})
    values["hashed_password"] = get_password_hash(user_data.password)

    user = await user_crud.create(values)
    await user_crud.commit_session()
    logger.info("Registered %s user %s", user.role.value, user.id)

    return OutUserSchema.model_validate(user)


@router.post("/login", response_model=Token)
async def login(form_data: Annotated[OAuth2PasswordRequestForm, Depends()], db: DbSessionDep):
    """Exchange email (as ``username``) and password for a bearer token."""
    user = await UsersCrud(db).get_by_email(form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")

    access_token = create_access_token(data={"sub": user.email, "role": user.role.value})
    return Token(access_token=access_token, token_type="bearer")


@router.get("/me", response_model=OutUserSchema)
async def read_users_me(current_user: GetActiveUserDep):
    return current_user
