from fastapi import APIRouter, Depends, Header, Response
from ..schemas import PropertyIn, ValuationResponse
from ..data.store import PropertyStore
from ..services.valuation_service import ValuationService
from ..core.security import require_api_key, rate_limit
from .deps import get_store, require_property, valuation_out, valuation_service_dep

router = APIRouter()

@router.post("/valuation", response_model=ValuationResponse)
def post_valuation(
    body: PropertyIn,
    response: Response,
    if_none_match: str | None = Header(default=None, alias="if-none-match"),
    _auth = Depends(require_api_key),     # API key guard
    _lim  = Depends(rate_limit),          # Rate limiting
    svc: ValuationService = Depends(valuation_service_dep),
):
    payload, from_cache, etag = svc.value_property(body.to_record())
    if if_none_match and if_none_match == etag:
        return Response(status_code=304, headers={"ETag": etag})
    payload["cached"] = from_cache
    payload["etag"] = etag
    response.headers["ETag"] = etag
    return payload

@router.post("/properties/{property_id}/valuation", response_model=ValuationResponse)
def value_stored_property(
    property_id: str,
    _auth = Depends(require_api_key),
    _lim  = Depends(rate_limit),
    store: PropertyStore = Depends(get_store),
    svc: ValuationService = Depends(valuation_service_dep),
):
    """Value a saved property and keep the result on its history."""
    row = require_property(store, property_id)
    record, source = svc.valuate(row.record)
    entry = store.add_valuation(row.id, record, source)
    return valuation_out(entry)
