from fastapi import APIRouter, Depends, Query
from ..schemas import PropertyIn, PropertyList, PropertyOut, PropertySummary
from ..data.store import PropertyStore, latest
from ..core.security import require_api_key, rate_limit
from .deps import get_store, legal_check_out, property_out, require_property, valuation_out

router = APIRouter()

@router.post("/properties", response_model=PropertyOut, status_code=201)
def create_property(
    body: PropertyIn,
    owner_id: str = Query(default="default-user", alias="userId"),
    _auth = Depends(require_api_key),
    _lim  = Depends(rate_limit),
    store: PropertyStore = Depends(get_store),
):
    row = store.create(body.to_record(), owner_id=owner_id)
    return property_out(row)

@router.get("/properties", response_model=PropertyList)
def list_properties(
    owner_id: str = Query(default="default-user", alias="userId"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    _auth = Depends(require_api_key),
    _lim  = Depends(rate_limit),
    store: PropertyStore = Depends(get_store),
):
    rows, total = store.list(owner_id=owner_id, limit=limit, offset=offset)
    items = []
    for row in rows:
        valuation = latest(row.valuations)
        legal = latest(row.legal_checks)
        items.append(PropertySummary(
            **property_out(row).model_dump(),
            latest_valuation=valuation_out(valuation) if valuation else None,
            latest_legal_check=legal_check_out(legal) if legal else None,
        ))
    return PropertyList(properties=items, total=total)

@router.get("/properties/{property_id}", response_model=PropertyOut)
def get_property(
    property_id: str,
    _auth = Depends(require_api_key),
    _lim  = Depends(rate_limit),
    store: PropertyStore = Depends(get_store),
):
    return property_out(require_property(store, property_id))
