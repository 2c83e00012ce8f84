# storefront/api/auth.py
# Роуты для регистрации, получения JWT токена и профиля.
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm
from datetime import timedelta

from storefront.core import security
from storefront.core.config import settings
from storefront.db.transaction import atomic
from storefront.models.user import User, RoleEnum
from storefront.schemas.user import Token, UserCreate, UserOut

router = APIRouter()

@router.post("/register", response_model=UserOut, status_code=201)
def register(payload: UserCreate, db: Session = Depends(security.get_db)):
    """
    Регистрация пользователя: email + password.
    По умолчанию роль = client; администратора назначает scripts/make_admin.py.
    """
    email = payload.email.strip().lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    user = User(
        email=email,
        hashed_password=security.get_password_hash(payload.password),
        full_name=payload.full_name,
        role=RoleEnum.client,
    )
    with atomic(db, "auth.register"):
        db.add(user)
    return user

@router.post("/token", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(security.get_db)):
    """
    Логин: возвращает access_token (JWT).
    OAuth2PasswordRequestForm ожидает username и password — используем email как username.
    """
    user = db.query(User).filter(User.email == form_data.username.strip().lower()).first()
    if not user or not user.hashed_password or not security.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Incorrect credentials")
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    token = security.create_access_token(subject=str(user.id), expires_delta=access_token_expires)
    return {"access_token": token, "token_type": "bearer"}

@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(security.get_current_user)):
    return current_user
