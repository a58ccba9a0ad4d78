"""
User API Routes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.core.dependencies import get_current_user
from marketplace.infrastructure.database import get_db
from marketplace.models import User
from marketplace.schemas import LoginRequest, UserCreate
from marketplace.services import UserService

router = APIRouter(tags=["users"])


@router.post("/users", status_code=201)
def create_user(request: UserCreate, db: Session = Depends(get_db)):
    """Register a new user"""
    user = UserService.create_user(
        db,
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        password=request.password,
    )
    return {"user_id": user.user_id}


@router.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Log in and receive a session token"""
    return UserService.login(db, request.email, request.password)


@router.post("/logout")
def logout(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Invalidate the caller's session token"""
    UserService.logout(db, user)
    return {"success": True}


@router.get("/users/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db)):
    """Public profile with selling, bidding and ended auctions"""
    return UserService.get_profile(db, user_id)
