from __future__ import annotations

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Response

from src.api.dependencies import get_directory_service
from src.schemas.directory import Customer, CustomerSaveRequest, CustomerUpdateResult
from src.services.directory_service import DirectoryService
from src.shared.response import Meta, ResponseEnvelope


router = APIRouter(prefix="/customers", tags=["customers"])


def _meta() -> Meta:
    return Meta(
        as_of_date=date.today().isoformat(),
        source="customers",
        time_window="na",
        calculation_version="v1",
    )


@router.get("")
def list_customers(
    service: DirectoryService = Depends(get_directory_service),
) -> ResponseEnvelope[List[Customer]]:
    return ResponseEnvelope(data=service.list_customers(), meta=_meta())


@router.post("", status_code=201)
def create_customer(
    request: CustomerSaveRequest,
    service: DirectoryService = Depends(get_directory_service),
) -> ResponseEnvelope[Customer]:
    return ResponseEnvelope(data=service.create_customer(request), meta=_meta())


@router.put("/{customer_id}")
def update_customer(
    customer_id: str,
    request: CustomerSaveRequest,
    service: DirectoryService = Depends(get_directory_service),
) -> ResponseEnvelope[CustomerUpdateResult]:
    return ResponseEnvelope(data=service.update_customer(customer_id, request), meta=_meta())


@router.delete("/{customer_id}", status_code=204)
def delete_customer(
    customer_id: str,
    service: DirectoryService = Depends(get_directory_service),
) -> Response:
    service.delete_customer(customer_id)
    return Response(status_code=204)
