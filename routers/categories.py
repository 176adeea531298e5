from typing import List
from fastapi import APIRouter, status
import logging

from models import CategoryModel, CategoryCreate, CategoryUpdate, IdList, BasicResponse, CreatedResponse
from dependencies import CategoryServiceDep

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[CategoryModel])
async def list_categories(categories: CategoryServiceDep):
    return categories.all()


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_category(category: CategoryCreate, categories: CategoryServiceDep):
    category_id = categories.add(category.name, category.description)
    return CreatedResponse(id=category_id)


@router.put("/{category_id}", response_model=BasicResponse)
async def edit_category(category_id: int, category: CategoryUpdate, categories: CategoryServiceDep):
    categories.edit(category_id, category.name, category.description)
    return BasicResponse(message="Category saved successfully")


@router.post("/batch/delete", response_model=BasicResponse)
async def remove_categories(ids: IdList, categories: CategoryServiceDep):
    """Remove categories; their topics are kept"""
    categories.remove(ids.id_list)
    return BasicResponse(message="Categories removed successfully")
