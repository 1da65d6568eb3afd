from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Type
from orm_slots.database import get_db
from orm_slots.crud import slot as slot_crud
from orm_slots.models.slottable import Slottable
from orm_slots.schemas.slot import (
    SlotCreate,
    SlotUpdate,
    SlotResponse,
    SlotHostResponse,
    PaginatedSlotHostsResponse
)


def create_slot_router(
    model: Type[Slottable],
    prefix: Optional[str] = None,
    tags: Optional[List[str]] = None
) -> APIRouter:
    """Build the slot endpoints for one slottable model"""
    prefix = prefix or f"/{model.__tablename__.replace('_', '-')}"
    router = APIRouter(
        prefix=prefix,
        tags=tags or [f"{model.__tablename__}-slots"]
    )

    def get_record_or_404(record_id: str, db: Session):
        record = slot_crud.get_record(db, model, record_id)
        if not record:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"field": "record_id", "message": f"{model.__name__} not found"}
            )
        return record

    def slot_not_found(name: str):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"field": "name", "message": f"Slot '{name}' not found"}
        )

    @router.get("/", response_model=PaginatedSlotHostsResponse)
    def get_records(
        page: int = Query(1, ge=1),
        page_size: int = Query(10, ge=1, le=100),
        db: Session = Depends(get_db)
    ):
        """Get records with their slots, paginated"""
        records, total_count = slot_crud.get_records_with_slots(db, model, page=page, page_size=page_size)
        record_responses = [
            SlotHostResponse(
                id=getattr(record, model.__slot_host_key__),
                slots=[SlotResponse.model_validate(s) for s in record.slots]
            )
            for record in records
        ]
        return PaginatedSlotHostsResponse.create(
            records=record_responses,
            total_count=total_count,
            page=page,
            page_size=page_size
        )

    @router.get("/{record_id}/slots", response_model=List[SlotResponse])
    def get_slots(record_id: str, db: Session = Depends(get_db)):
        """List the slots of a record"""
        record = get_record_or_404(record_id, db)
        return [SlotResponse.model_validate(s) for s in slot_crud.get_slots(db, record)]

    @router.get("/{record_id}/slots/{name}", response_model=SlotResponse)
    def get_slot(record_id: str, name: str, db: Session = Depends(get_db)):
        """Get a slot of a record by name"""
        record = get_record_or_404(record_id, db)
        db_slot = slot_crud.get_slot(db, record, name)
        if not db_slot:
            raise slot_not_found(name)
        return SlotResponse.model_validate(db_slot)

    @router.post("/{record_id}/slots", response_model=SlotResponse, status_code=status.HTTP_201_CREATED)
    def create_slot(record_id: str, slot: SlotCreate, db: Session = Depends(get_db)):
        """Create a slot on a record (returns the existing slot if the name is taken by a slot)"""
        record = get_record_or_404(record_id, db)
        try:
            created_slot = slot_crud.create_slot(db, record, slot)
            return SlotResponse.model_validate(created_slot)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"field": "name", "message": str(e)}
            )

    @router.put("/{record_id}/slots/{name}", response_model=SlotResponse)
    def update_slot(record_id: str, name: str, slot: SlotUpdate, db: Session = Depends(get_db)):
        """Update the value (and optionally the type) of a slot"""
        record = get_record_or_404(record_id, db)
        updated_slot = slot_crud.update_slot(db, record, name, slot)
        if not updated_slot:
            raise slot_not_found(name)
        return SlotResponse.model_validate(updated_slot)

    @router.delete("/{record_id}/slots/{name}", response_model=SlotResponse)
    def delete_slot(record_id: str, name: str, db: Session = Depends(get_db)):
        """Remove a slot from a record"""
        record = get_record_or_404(record_id, db)
        removed_slot = slot_crud.delete_slot(db, record, name)
        if not removed_slot:
            raise slot_not_found(name)
        return SlotResponse.model_validate(removed_slot)

    return router
