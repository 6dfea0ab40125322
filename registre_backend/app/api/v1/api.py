# registre_backend/app/api/v1/api.py
from fastapi import APIRouter

from .routes import router as v1_routes_router

# Prefix "/api/v1" is applied in main.py
api_router = APIRouter()

api_router.include_router(v1_routes_router)
