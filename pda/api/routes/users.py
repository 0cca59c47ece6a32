from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pda.api.deps import get_current_user
from pda.db.models import User
from pda.db.session import get_db
from pda.schemas.users import ProfileUpdateRequest, UserBrief, UserDetailRead
from pda.services.auth_service import get_user_by_id, update_profile
from pda.services.social_service import social_service

router = APIRouter()


def _user_with_friends(db: Session, user: User) -> UserDetailRead:
    detail = UserDetailRead.model_validate(user)
    detail.friends = [
        UserBrief.model_validate(friend) for friend in social_service.list_friends(db, user.id)
    ]
    return detail


@router.get("/me", response_model=UserDetailRead)
def get_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserDetailRead:
    return _user_with_friends(db, current_user)


@router.patch("/me", response_model=UserDetailRead)
def update_me(
    payload: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserDetailRead:
    try:
        user = update_profile(db, current_user, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _user_with_friends(db, user)


@router.get("/{user_id}", response_model=UserDetailRead)
def get_user(
    user_id: str,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserDetailRead:
    user = get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return _user_with_friends(db, user)
