from sqlalchemy.orm import Session
from orm_slots.models.slot import Slot
from orm_slots.models.slottable import Slottable
from orm_slots.schemas.slot import SlotCreate, SlotUpdate
from typing import List, Optional, Tuple, Type
import logging

logger = logging.getLogger(__name__)


def _host_key(model: Type[Slottable]):
    return getattr(model, model.__slot_host_key__)


def get_record(db: Session, model: Type[Slottable], record_id) -> Optional[Slottable]:
    key = _host_key(model)
    # path parameters arrive as strings
    try:
        record_id = key.property.columns[0].type.python_type(record_id)
    except NotImplementedError:
        pass
    except ValueError:
        return None
    return db.query(model).filter(key == record_id).first()


def get_records_with_slots(
    db: Session,
    model: Type[Slottable],
    page: int = 1,
    page_size: int = 10
) -> Tuple[List[Slottable], int]:
    """Page through host records, loading their slots in a single joined query"""
    key = _host_key(model)
    total_count = db.query(key).count()

    # paginate on the host keys first, the slots join multiplies rows
    skip = (page - 1) * page_size
    record_ids = [row[0] for row in db.query(key).order_by(key).offset(skip).limit(page_size).all()]
    if not record_ids:
        return [], total_count

    query = model.add_slot_query_join(session=db)
    root = query.column_descriptions[0]["entity"]
    root_key = getattr(root, model.__slot_host_key__)
    rows = query.filter(root_key.in_(record_ids)).order_by(root_key).all()

    # one row per joined slot, the identity map hands back the same record object
    records = list(dict.fromkeys(rows))
    return records, total_count


def get_slots(db: Session, record: Slottable) -> List[Slot]:
    return list(record.get_slots_by_name().values())


def get_slot(db: Session, record: Slottable, name: str) -> Optional[Slot]:
    return record.get_slot(name)


def create_slot(db: Session, record: Slottable, slot: SlotCreate) -> Slot:
    """Get or create the named slot on a record"""
    try:
        db_slot = record.create_slot(slot.name, slot.type, slot.value)
        db.commit()
        db.refresh(db_slot)
        return db_slot

    except Exception:
        db.rollback()
        raise


def update_slot(db: Session, record: Slottable, name: str, slot: SlotUpdate) -> Optional[Slot]:
    db_slot = record.get_slot(name)
    if not db_slot:
        return None

    try:
        update_data = slot.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if key == "type" and value is None:
                continue
            setattr(db_slot, key, value)
        db.commit()
        db.refresh(db_slot)
        return db_slot

    except Exception:
        db.rollback()
        raise


def delete_slot(db: Session, record: Slottable, name: str) -> Optional[Slot]:
    """Unlink the named slot from a record. The slot row itself is kept."""
    db_slot = record.get_slot(name)
    if not db_slot:
        return None

    try:
        record.remove_slot(db_slot)
        db.commit()
        db.refresh(db_slot)
        logger.info(f"Removed slot '{name}' from {record!r}")
        return db_slot

    except Exception:
        db.rollback()
        raise
