# heritage_nest/crud.py
"""Store operations for `User` and `Property` records.

Every write here is a single statement or a single transaction. Conditions
that must hold at write time (email uniqueness, bid monotonicity) are
expressed to the database, never checked by a separate read first.
"""
from sqlalchemy import and_, or_, func, update, delete, literal_column
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional, Tuple

from .models import User, Property, TEXT_SEARCH_COLUMNS, search_document
from .utils import utcnow


def create_user(db: Session, data: Dict[str, Any]) -> bool:
    """Insert a user; False when the email is already taken."""
    db.add(User(**data))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    return True

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def list_properties(db: Session) -> List[Property]:
    return db.query(Property).all()

def text_search_condition(db: Session, search_text: str):
    if db.get_bind().dialect.name == "postgresql":
        query = func.plainto_tsquery(literal_column("'english'::regconfig"), search_text)
        return search_document().op("@@")(query)
    # every term must occur in one of the text columns
    return and_(*[
        or_(*[func.lower(col).contains(term.lower(), autoescape=True) for col in TEXT_SEARCH_COLUMNS])
        for term in search_text.split()
    ])

def search_properties(db: Session, filters: Dict = None) -> List[Property]:
    q = db.query(Property)
    if filters:
        conds = []
        # text search leads so the planner can use the text index
        if filters.get("search_text"):
            conds.append(text_search_condition(db, filters["search_text"]))
        if filters.get("budget") is not None:
            conds.append(Property.price <= filters["budget"])
        if filters.get("property_type"):
            conds.append(Property.property_type == filters["property_type"])
        if filters.get("location"):
            conds.append(Property.location == filters["location"])
        if conds:
            q = q.filter(and_(*conds))
    return q.all()

def get_property(db: Session, property_id: str) -> Optional[Property]:
    return db.query(Property).filter(Property.id == property_id).first()

def property_exists(db: Session, property_id: str) -> bool:
    return db.query(Property.id).filter(Property.id == property_id).first() is not None

def insert_property(db: Session, columns: Dict[str, Any], extra: Dict[str, Any], stamp: str) -> str:
    obj = Property(**columns, extra=extra, created_at=stamp, updated_at=stamp)
    db.add(obj)
    db.commit()
    return obj.id

class ExtraFieldsOverflow(ValueError):
    """Merging would push a listing's extra map past its key limit."""

def update_property(db: Session, property_id: str, columns: Dict[str, Any],
                    extra: Dict[str, Any], stamp: str, max_extra: int) -> Tuple[int, int]:
    """Merge the given fields into a listing. Returns (matched, modified).

    ``modified`` is 1 only when a column or extra attribute actually changed;
    ``updated_at`` is re-stamped either way.
    """
    obj = db.query(Property).filter(Property.id == property_id).with_for_update().first()
    if not obj:
        return 0, 0
    merged = {**(obj.extra or {}), **extra}
    if len(merged) > max_extra:
        db.rollback()
        raise ExtraFieldsOverflow(f"at most {max_extra} additional fields are allowed, update would store {len(merged)}")
    changed = merged != (obj.extra or {})
    for k, v in columns.items():
        if getattr(obj, k) != v:
            setattr(obj, k, v)
            changed = True
    if extra:
        obj.extra = merged
    # applied last so a client-sent updated_at never survives
    obj.updated_at = stamp
    db.commit()
    return 1, int(changed)

def delete_property(db: Session, property_id: str) -> int:
    result = db.execute(delete(Property).where(Property.id == property_id))
    db.commit()
    return result.rowcount

def place_bid(db: Session, property_id: str, amount: float, bidder: Dict[str, Any]) -> int:
    """Record a bid only if it beats both the floor and the current high bid.

    ``bidder`` carries ``bidder_id``, ``name``, ``email`` and ``phone``; a
    missing ``bidder_id`` keeps the previous bidder's id. Returns the number of
    rows written (0 when the listing is missing or the bid is too low).
    """
    values = {
        "current_bid": amount,
        "bid_time": utcnow(),
        "name": bidder.get("name"),
        "email": bidder.get("email"),
        "phone": bidder.get("phone"),
    }
    if bidder.get("bidder_id") is not None:
        values["bidder_id"] = bidder["bidder_id"]
    stmt = (
        update(Property)
        .where(Property.id == property_id)
        .where(or_(Property.starting_bid.is_(None), Property.starting_bid < amount))
        .where(or_(Property.current_bid.is_(None), Property.current_bid < amount))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount
