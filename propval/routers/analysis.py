from fastapi import APIRouter, Depends
from ..schemas import FinancialModelOut, FinancialModelRequest, LegalCheckOut, LegalCheckRequest
from ..data.base import FinancingOptions, LegalCheckOptions
from ..data.store import PropertyStore, latest
from ..services.analysis_service import FinancialModelService, LegalCheckService
from ..core.security import require_api_key, rate_limit
from .deps import (
    financial_model_out,
    financial_service_dep,
    get_store,
    legal_check_out,
    legal_service_dep,
    require_property,
)

router = APIRouter()

@router.post("/legal-check", response_model=LegalCheckOut)
def post_legal_check(
    body: LegalCheckRequest,
    _auth = Depends(require_api_key),
    _lim  = Depends(rate_limit),
    store: PropertyStore = Depends(get_store),
    svc: LegalCheckService = Depends(legal_service_dep),
):
    row = require_property(store, body.property_id)
    options = LegalCheckOptions(
        include_jakarta_satu=body.include_jakarta_satu,
        include_sentuh_tanahku=body.include_sentuh_tanahku,
    )
    result, source = svc.check(row.record, options)
    return legal_check_out(store.add_legal_check(row.id, result, source))

@router.post("/financial-model", response_model=FinancialModelOut)
def post_financial_model(
    body: FinancialModelRequest,
    _auth = Depends(require_api_key),
    _lim  = Depends(rate_limit),
    store: PropertyStore = Depends(get_store),
    svc: FinancialModelService = Depends(financial_service_dep),
):
    row = require_property(store, body.property_id)
    valuation = latest(row.valuations)
    options = FinancingOptions(
        loan_amount=body.loan_amount,
        interest_rate=body.interest_rate,
        loan_term=body.loan_term,
        include_stress_test=body.include_stress_test,
        scenarios=tuple(body.scenarios),
    )
    result, source = svc.analyze(
        row.record,
        valuation.result.estimated_value if valuation else None,
        valuation.result.confidence_score if valuation else None,
        options,
    )
    return financial_model_out(store.add_financial_model(row.id, result, source))
