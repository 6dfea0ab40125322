# registre_backend/app/api/v1/routes/__init__.py
from fastapi import APIRouter
from .registre import router as registre_router

router = APIRouter()

router.include_router(registre_router, prefix="/registre", tags=["Registre"])
