from sqlalchemy import Column, Integer, String, Text
from orm_slots.database import Base

DEFAULT_SLOT_TYPE = "Text"


class Slot(Base):
    __tablename__ = "slots"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    # name of the field type used to edit/render the value, e.g. "Text", "Markdown"
    type = Column(String(255), nullable=False, default=DEFAULT_SLOT_TYPE)
    value = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Slot(id={self.id}, name='{self.name}', type='{self.type}')>"
