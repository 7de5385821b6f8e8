from __future__ import annotations

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Response

from src.api.dependencies import get_directory_service
from src.schemas.directory import Supplier, SupplierSaveRequest, SupplierUpdateResult
from src.services.directory_service import DirectoryService
from src.shared.response import Meta, ResponseEnvelope


router = APIRouter(prefix="/suppliers", tags=["suppliers"])


def _meta() -> Meta:
    return Meta(
        as_of_date=date.today().isoformat(),
        source="suppliers",
        time_window="na",
        calculation_version="v1",
    )


@router.get("")
def list_suppliers(
    service: DirectoryService = Depends(get_directory_service),
) -> ResponseEnvelope[List[Supplier]]:
    return ResponseEnvelope(data=service.list_suppliers(), meta=_meta())


@router.post("", status_code=201)
def create_supplier(
    request: SupplierSaveRequest,
    service: DirectoryService = Depends(get_directory_service),
) -> ResponseEnvelope[Supplier]:
    return ResponseEnvelope(data=service.create_supplier(request), meta=_meta())


@router.put("/{supplier_id}")
def update_supplier(
    supplier_id: str,
    request: SupplierSaveRequest,
    service: DirectoryService = Depends(get_directory_service),
) -> ResponseEnvelope[SupplierUpdateResult]:
    return ResponseEnvelope(data=service.update_supplier(supplier_id, request), meta=_meta())


@router.delete("/{supplier_id}", status_code=204)
def delete_supplier(
    supplier_id: str,
    service: DirectoryService = Depends(get_directory_service),
) -> Response:
    service.delete_supplier(supplier_id)
    return Response(status_code=204)
