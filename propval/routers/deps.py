from dataclasses import asdict

from fastapi import HTTPException, Request

from ..data.base import StoredEntry, StoredProperty
from ..data.store import PropertyStore
from ..schemas import FinancialModelOut, LegalCheckOut, PropertyOut, ValuationResponse
from ..services.analysis_service import FinancialModelService, LegalCheckService
from ..services.valuation_service import ValuationService, valuation_payload


def get_store(request: Request) -> PropertyStore:
    return request.app.state.store

# Cheap factories: the expensive chat client is built once in create_app and shared.
def valuation_service_dep(request: Request) -> ValuationService:
    return ValuationService.from_client(request.app.state.openai_client)

def legal_service_dep(request: Request) -> LegalCheckService:
    return LegalCheckService.from_client(request.app.state.openai_client)

def financial_service_dep(request: Request) -> FinancialModelService:
    return FinancialModelService.from_client(request.app.state.openai_client)


def require_property(store: PropertyStore, property_id: str) -> StoredProperty:
    row = store.get(property_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Property not found")
    return row


def property_out(row: StoredProperty) -> PropertyOut:
    return PropertyOut(id=row.id, created_at=row.created_at, **asdict(row.record))

def valuation_out(entry: StoredEntry) -> ValuationResponse:
    return ValuationResponse(**valuation_payload(entry.result, entry.source))

def legal_check_out(entry: StoredEntry) -> LegalCheckOut:
    return LegalCheckOut(
        id=entry.id,
        property_id=entry.property_id,
        source=entry.source,
        verification_date=entry.created_at,
        **asdict(entry.result),
    )

def financial_model_out(entry: StoredEntry) -> FinancialModelOut:
    return FinancialModelOut(
        id=entry.id,
        property_id=entry.property_id,
        source=entry.source,
        created_at=entry.created_at,
        **asdict(entry.result),
    )
