from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_db
from app.models.users import User
from app.schemas.user import UserCreate, UserResponse, SessionResponse
from app.core.auth import SessionContext, get_current_user, get_admin_user
from app.core.hashing import hash_password, verify_password
from app.core.jwt import create_access_token
from app.core.rate_limiter import limiter

router = APIRouter(prefix="/auth", tags=["Authentication"])

COMMON_PASSWORDS = {
    "password",
    "password123",
    "12345678",
    "qwerty123",
    "admin123",
}


# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login")
@limiter.limit("5/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.username == form_data.username).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(
        data={"sub": str(user.id), "role": user.role}
    )

    return {
        "access_token": token,
        "token_type": "bearer"
    }


# ---------------- CURRENT SESSION ----------------
@router.get("/me", response_model=SessionResponse)
def me(current_user: SessionContext = Depends(get_current_user)):
    return SessionResponse(
        user_id=current_user.user_id,
        username=current_user.username,
        role=current_user.role,
    )


# ---------------- CREATE USER (ADMIN) ----------------
@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    admin: SessionContext = Depends(get_admin_user),
):
    if user_data.password.lower() in COMMON_PASSWORDS:
        raise HTTPException(
            status_code=400,
            detail="Password is too common. Please choose a stronger password.",
        )

    if user_data.password.isdigit():
        raise HTTPException(
            status_code=400,
            detail="Password cannot be numbers only.",
        )

    if db.query(User).filter(User.username == user_data.username).first():
        raise HTTPException(status_code=409, detail="Username already exists")

    try:
        user = User(
            username=user_data.username,
            password_hash=hash_password(user_data.password),
            role=user_data.role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Unable to create account")

    return user
