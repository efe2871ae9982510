"""Client catalog endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ...models.domain import Client
from ...schemas.visits import ClientModel
from ..dependencies import get_client_catalog

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=List[ClientModel])
def list_clients(catalog: tuple[Client, ...] = Depends(get_client_catalog)) -> List[ClientModel]:
    return [ClientModel.model_validate(client) for client in catalog]
