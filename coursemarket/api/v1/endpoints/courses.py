from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from coursemarket.api.dependencies import get_catalog_service
from coursemarket.schemas.course import CourseDetailResponse, CourseListResponse, SubjectResponse
from coursemarket.services.catalog_service import CatalogService

router = APIRouter()

@router.get("/languages", response_model=List[SubjectResponse], tags=["Subjects"])
async def read_subjects(catalog: CatalogService = Depends(get_catalog_service)):
    """Все предметы (исторически - языки)"""
    return catalog.list_subjects()

@router.get("/courses", response_model=CourseListResponse)
async def read_courses(
    language: Optional[str] = None,
    level: Optional[str] = None,
    search: Optional[str] = None,
    featured: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """Каталог курсов с фильтрами и пагинацией"""
    return catalog.list_courses(
        page=page,
        limit=limit,
        subject=language,
        level=level,
        search=search,
        featured=featured
    )

@router.get("/courses/{course_id}", response_model=CourseDetailResponse)
async def read_course(
    course_id: int,
    catalog: CatalogService = Depends(get_catalog_service)
):
    """Курс с программой, оценками и отзывами"""
    return catalog.get_course_detail(course_id)
