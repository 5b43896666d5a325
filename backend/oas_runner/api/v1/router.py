"""
API v1 router.
"""
from fastapi import APIRouter

from oas_runner.api.v1.endpoints import (
    oas,
    auth_configs,
)

api_router = APIRouter()

api_router.include_router(oas.router, prefix="/oas", tags=["oas"])
api_router.include_router(auth_configs.router, prefix="/auth-configs", tags=["auth-configs"])
