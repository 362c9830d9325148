from fastapi import APIRouter
from typing import List

from common.enum import CategoryEnum

router = APIRouter()


@router.get("", response_model=List[CategoryEnum])
def list_categories():
    """List the fixed transaction categories, in display order"""
    return list(CategoryEnum)
