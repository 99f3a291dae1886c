# heritage_nest/services.py
from . import crud, schemas
from sqlalchemy.orm import Session
from .errors import ErrorKind, ServiceError
from .models import Property, DEFAULT_ROLE
from .security import hash_password, verify_password, create_access_token
from .utils import logger, now_iso
from typing import Any, Dict, List, Optional

INVALID_CREDENTIALS = "Invalid email or password"
PROPERTY_NOT_FOUND = "Property not found"


# ---- accounts -----------------------------------------------------------

def register_user(db: Session, req: schemas.RegisterRequest) -> Dict[str, Any]:
    created = crud.create_user(db, {
        "name": req.name,
        "email": req.email,
        "phone": req.phone,
        "password": hash_password(req.password),
        "role": DEFAULT_ROLE,
    })
    if not created:
        raise ServiceError(ErrorKind.duplicate_account, "User already exists")
    logger.info("Registered user %s", req.email)
    return {"success": True, "message": "User registered successfully"}

def login_user(db: Session, req: schemas.LoginRequest) -> Dict[str, Any]:
    user = crud.get_user_by_email(db, req.email)
    # same error for unknown email and wrong password
    if not user or not verify_password(req.password, user.password):
        logger.warning("Failed login for %s", req.email)
        raise ServiceError(ErrorKind.invalid_credentials, INVALID_CREDENTIALS)
    logger.info("User %s logged in", user.email)
    return {"success": True, "message": "Login successful", "token": create_access_token(user.email)}


# ---- listings -----------------------------------------------------------

def property_to_dict(obj: Property) -> Dict[str, Any]:
    """Flatten a listing into one JSON object, extra attributes included."""
    data = dict(obj.extra or {})
    data.update({
        "_id": obj.id,
        "title": obj.title,
        "description": obj.description,
        "location": obj.location,
        "property_type": obj.property_type,
        "price": obj.price,
        "starting_bid": obj.starting_bid,
        "current_bid": obj.current_bid,
        "bidder_id": obj.bidder_id,
        "name": obj.name,
        "email": obj.email,
        "phone": obj.phone,
        "bid_time": obj.bid_time,
        "created_at": obj.created_at,
        "updated_at": obj.updated_at,
    })
    return data

def parse_budget(budget: Optional[str]) -> Optional[float]:
    if budget is None or str(budget).strip() == "":
        return None
    try:
        value = float(budget)
    except (TypeError, ValueError):
        raise ServiceError(ErrorKind.invalid_filter, f"budget must be a number, got {budget!r}")
    if value != value:  # NaN
        raise ServiceError(ErrorKind.invalid_filter, "budget must be a number")
    return value

def list_properties(db: Session) -> List[Dict[str, Any]]:
    return [property_to_dict(p) for p in crud.list_properties(db)]

def search_properties(db: Session, flt: schemas.PropertyFilter) -> List[Dict[str, Any]]:
    filters = {
        "search_text": (flt.search_text or "").strip() or None,
        "budget": parse_budget(flt.budget),
        "property_type": flt.property_type or None,
        "location": flt.location or None,
    }
    logger.debug("Property search %s", filters)
    return [property_to_dict(p) for p in crud.search_properties(db, filters)]

def get_property(db: Session, property_id: str) -> Dict[str, Any]:
    obj = crud.get_property(db, property_id)
    if not obj:
        raise ServiceError(ErrorKind.not_found, PROPERTY_NOT_FOUND)
    return property_to_dict(obj)

def create_property(db: Session, payload: schemas.PropertyFields) -> Dict[str, Any]:
    columns, extra = payload.split()
    new_id = crud.insert_property(db, columns, extra, now_iso())
    logger.info("Created property %s", new_id)
    return {"acknowledged": True, "inserted_id": new_id}

def update_property(db: Session, property_id: str, payload: schemas.PropertyFields) -> Dict[str, Any]:
    columns, extra = payload.split()
    try:
        matched, modified = crud.update_property(db, property_id, columns, extra, now_iso(),
                                                 max_extra=schemas.MAX_EXTRA_FIELDS)
    except crud.ExtraFieldsOverflow as e:
        raise ServiceError(ErrorKind.invalid_attributes, str(e))
    if matched == 0:
        raise ServiceError(ErrorKind.not_found, PROPERTY_NOT_FOUND)
    logger.info("Updated property %s (%s)", property_id, ", ".join(sorted({**columns, **extra})) or "timestamp only")
    return {
        "message": "Property updated successfully",
        "result": {"acknowledged": True, "matched_count": matched, "modified_count": modified},
    }

def delete_property(db: Session, property_id: str) -> Dict[str, Any]:
    if crud.delete_property(db, property_id) == 0:
        raise ServiceError(ErrorKind.not_found, PROPERTY_NOT_FOUND)
    logger.info("Deleted property %s", property_id)
    return {"message": "Property deleted successfully"}

def place_bid(db: Session, property_id: str, bid: schemas.BidRequest) -> Dict[str, Any]:
    bidder = {
        "bidder_id": str(bid.bidder_id) if bid.bidder_id not in (None, "") else None,
        "name": bid.name,
        "email": bid.email,
        "phone": bid.phone,
    }
    written = crud.place_bid(db, property_id, bid.bid_amount, bidder)
    if written == 0:
        # nothing matched: either no such listing or the bid did not beat floor/high bid
        if not crud.property_exists(db, property_id):
            raise ServiceError(ErrorKind.not_found, PROPERTY_NOT_FOUND)
        logger.warning("Rejected bid %s on property %s", bid.bid_amount, property_id)
        raise ServiceError(ErrorKind.invalid_bid, "Invalid bid amount")
    logger.info("Accepted bid %s on property %s", bid.bid_amount, property_id)
    return {"acknowledged": True, "matched_count": written, "modified_count": written}
