"""
Named auth configuration endpoints.
"""
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, Field

from oas_runner.api.deps import get_auth_store
from oas_runner.core.exceptions import AuthConfigError
from oas_runner.services.auth_store import AuthConfigStore

logger = logging.getLogger(__name__)

router = APIRouter()


class AuthConfigIn(BaseModel):
    """Auth configuration as supplied by clients."""
    type: str = Field("bearer", description="Authentication type: bearer, apiKey, basic, oauth2, custom")
    token: Optional[str] = None
    header: Optional[str] = None
    value: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    headers: Optional[Dict[str, str]] = None

    def as_config(self) -> dict:
        return self.model_dump(exclude_none=True)


class AuthConfigCreate(BaseModel):
    """Named auth configuration."""
    name: str = Field(..., description="Name the configuration is stored under")
    config: AuthConfigIn


@router.post("")
def save_auth_config(
    request: AuthConfigCreate = Body(...),
    store: AuthConfigStore = Depends(get_auth_store),
):
    """Create or replace a named auth configuration."""
    try:
        return store.save(request.name, request.config.as_config())
    except AuthConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("")
def list_auth_configs(store: AuthConfigStore = Depends(get_auth_store)):
    """List stored auth configurations with secrets masked."""
    return {"auth_configs": store.list()}


@router.get("/{name}")
def get_auth_config(name: str, store: AuthConfigStore = Depends(get_auth_store)):
    """Get one auth configuration with secrets masked."""
    entry = store.get(name)
    if entry is None:
        raise HTTPException(status_code=404, detail="Auth config not found")
    return entry


@router.delete("/{name}")
def delete_auth_config(name: str, store: AuthConfigStore = Depends(get_auth_store)):
    """Delete a named auth configuration."""
    if not store.delete(name):
        raise HTTPException(status_code=404, detail="Auth config not found")
    return {"message": "Auth config deleted successfully", "name": name}
