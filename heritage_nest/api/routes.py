# heritage_nest/api/routes.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from .. import services, schemas
from ..db import get_db
from ..utils import utcnow

router = APIRouter()

ERRORS = {
    400: {"model": schemas.ErrorResponse},
    401: {"model": schemas.ErrorResponse},
    404: {"model": schemas.ErrorResponse},
    422: {"model": schemas.ErrorResponse},
    500: {"model": schemas.ErrorResponse},
}


@router.get("/", response_model=schemas.ServerStatus, tags=["status"])
def server_status():
    return {"message": "Server is running smoothly", "timestamp": utcnow()}

@router.get("/health", response_model=schemas.HealthStatus, tags=["status"])
def health():
    return {"status": "ok"}


@router.post("/register", status_code=201, response_model=schemas.RegisterResponse,
             responses={400: ERRORS[400]}, tags=["accounts"])
def register(payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    return services.register_user(db, payload)

@router.post("/login", response_model=schemas.LoginResponse,
             responses={401: ERRORS[401]}, tags=["accounts"])
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    return services.login_user(db, payload)


@router.get("/properties", response_model=List[schemas.PropertyOut], tags=["properties"])
def list_properties(db: Session = Depends(get_db)):
    return services.list_properties(db)


# registered before /properties/{property_id} so it is not taken for an id
@router.get("/properties/search-query", response_model=List[schemas.PropertyOut],
            responses={400: ERRORS[400]}, tags=["properties"])
def search_properties(
    budget: str | None = Query(None),
    property_type: str | None = Query(None, alias="propertyType"),
    location: str | None = Query(None),
    search_text: str | None = Query(None, alias="searchText"),
    db: Session = Depends(get_db)
):
    flt = schemas.PropertyFilter(
        budget=budget,
        property_type=property_type,
        location=location,
        search_text=search_text,
    )
    return services.search_properties(db, flt)


@router.get("/properties/{property_id}", response_model=schemas.PropertyOut,
            responses={404: ERRORS[404]}, tags=["properties"])
def get_property(property_id: str, db: Session = Depends(get_db)):
    return services.get_property(db, property_id)


@router.post("/properties", status_code=201, response_model=schemas.InsertResult, tags=["properties"])
def create_property(payload: schemas.PropertyFields, db: Session = Depends(get_db)):
    return services.create_property(db, payload)


@router.patch("/properties/{property_id}", response_model=schemas.UpdateResponse,
              responses={404: ERRORS[404], 422: ERRORS[422]}, tags=["properties"])
def update_property(property_id: str, payload: schemas.PropertyFields, db: Session = Depends(get_db)):
    return services.update_property(db, property_id, payload)


@router.delete("/properties/{property_id}", response_model=schemas.MessageResponse,
               responses={404: ERRORS[404]}, tags=["properties"])
def delete_property(property_id: str, db: Session = Depends(get_db)):
    return services.delete_property(db, property_id)


@router.patch("/properties/{property_id}/bid", response_model=schemas.WriteResult,
              responses={400: ERRORS[400], 404: ERRORS[404]}, tags=["bids"])
def place_bid(property_id: str, payload: schemas.BidRequest, db: Session = Depends(get_db)):
    return services.place_bid(db, property_id, payload)
