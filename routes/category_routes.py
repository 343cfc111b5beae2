"""
Category routes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlmodel import Session

from auth_service import get_current_user
from constants import TransactionType
from models import User
from repositories import CategoryRepository
from sqlalchemy_db import get_db_session

router = APIRouter(prefix="/api/categories", tags=["categories"])


class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    type: TransactionType = TransactionType.EXPENSE
    icon: Optional[str] = None
    color: Optional[str] = Field(default=None, max_length=20)
    parent_id: Optional[str] = None


class CategoryUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = Field(default=None, max_length=20)


@router.get("")
def list_categories(
    type: Optional[TransactionType] = None,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Get default categories plus the current user's own, ordered by name.

    Args:
        type: Optional 'income' or 'expense' filter
    """
    categories = CategoryRepository(session).list_categories(
        current_user.id, type=type.value if type else None
    )
    return [category.to_dict() for category in categories]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(
    request: CategoryCreateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = CategoryRepository(session)
    if request.parent_id and repository.get_visible_category(request.parent_id, current_user.id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Parent category not found"
        )

    fields = request.model_dump()
    fields["type"] = request.type.value
    return repository.create_category(current_user.id, **fields).to_dict()


@router.post("/seed")
def seed_categories(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Create the default categories if they do not exist yet."""
    created = CategoryRepository(session).seed_default_categories()
    return {"message": "Default categories seeded", "created": created}


def _own_category(category_id: str, user: User, repository: CategoryRepository):
    category = repository.get_category(category_id)
    if category is None or (not category.is_default and category.created_by != user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    if category.is_default:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Default categories cannot be modified"
        )
    return category


@router.put("/{category_id}")
def update_category(
    category_id: str,
    request: CategoryUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = CategoryRepository(session)
    category = _own_category(category_id, current_user, repository)
    changes = request.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name cannot be null")
    return repository.update_category(category, changes).to_dict()


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = CategoryRepository(session)
    category = _own_category(category_id, current_user, repository)
    try:
        repository.delete_category(category)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
