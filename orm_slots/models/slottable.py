"""
Slot behaviour for declarative models.

Mixing ``Slottable`` into a model creates a many-to-many reference table between
that model and ``Slot`` and adds the slot accessors to its instances::

    class Article(Slottable, Base):
        __tablename__ = "articles"

        id = Column(Integer, primary_key=True)
        title = Column(String(255))

    article.create_slot("teaser", "Markdown", "Coming soon")
    article.get_slot("teaser").value
"""
import logging
import re
from typing import Any, Dict, Optional, Union

from sqlalchemy import Column, ForeignKey, Table, inspect
from sqlalchemy.orm import (
    Query,
    Session,
    aliased,
    backref,
    contains_eager,
    declared_attr,
    object_session,
    relationship,
)

from orm_slots.exceptions import SlotAliasConflictError, SlotError, SlotFieldConflictError, UnknownSlotError
from orm_slots.models.slot import DEFAULT_SLOT_TYPE, Slot

logger = logging.getLogger(__name__)


def _snake_case(name: str) -> str:
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).lower()


def _find_mapped_class(registry, class_name: str):
    for mapper in registry.mappers:
        if mapper.class_.__name__ == class_name:
            return mapper.class_
    return None


def _root_alias(entity) -> str:
    insp = inspect(entity)
    if getattr(insp, "is_aliased_class", False):
        return insp.name
    return insp.local_table.name


class Slottable:
    # optional overrides, set on the host model
    __slot_ref_table__ = None
    __slot_local_column__ = None
    __slot_host_key__ = "id"

    # transient name -> Slot index, never persisted
    _slots_by_name = None

    @classmethod
    def slot_local_column(cls) -> str:
        """Name of the reference table column pointing at the host record."""
        return cls.__slot_local_column__ or f"{_snake_case(cls.__name__)}_id"

    @classmethod
    def slot_ref_table(cls) -> Table:
        """Return the many-to-many table between this model and ``Slot``, creating it once."""
        name = cls.__slot_ref_table__ or f"{cls.__tablename__}_slots"
        table = cls.metadata.tables.get(name)
        if table is None:
            table = Table(
                name,
                cls.metadata,
                Column(
                    cls.slot_local_column(),
                    ForeignKey(f"{cls.__tablename__}.{cls.__slot_host_key__}", ondelete="CASCADE"),
                    primary_key=True,
                ),
                # column object so the key resolves when the host uses its own metadata
                Column("slot_id", ForeignKey(Slot.__table__.c.id, ondelete="CASCADE"), primary_key=True),
            )
            logger.debug(f"Created slot reference table '{name}' for {cls.__name__}")
        return table

    @declared_attr
    def slots(cls):
        # the backref gives Slot the inverse collection, e.g. Slot.articles
        return relationship(
            Slot,
            secondary=cls.slot_ref_table(),
            order_by=Slot.id,
            backref=backref(cls.__tablename__),
        )

    def get_slots_by_name(self, force: bool = False) -> Dict[str, Slot]:
        """
        Return the slots of this record keyed by slot name.

        The mapping is cached on the instance. ``force`` discards the cache and
        rebuilds it. A persistent record without unflushed slot changes also
        reloads its slots collection from the database first.
        """
        if self._slots_by_name is None or force:
            if force:
                self._reload_slots()

            slots_by_name: Dict[str, Slot] = {}
            for slot in self.slots:
                slots_by_name.setdefault(slot.name, slot)
            self._slots_by_name = slots_by_name

        return self._slots_by_name

    def _reload_slots(self) -> None:
        state = inspect(self)
        session = object_session(self)
        if session is None or not state.persistent:
            return
        if state.attrs.slots.history.has_changes():
            return
        # next access of self.slots lazy loads the persisted collection
        session.expire(self, ["slots"])

    def has_slot(self, name: str) -> bool:
        return name in self.get_slots_by_name()

    def has_slots(self) -> bool:
        return len(self.get_slots_by_name()) > 0

    def get_slot(self, name: str) -> Optional[Slot]:
        return self.get_slots_by_name().get(name)

    def remove_slot(self, slot: Union[Slot, str]) -> None:
        """Unlink a slot (given as object or name) from this record. Unknown slots are ignored."""
        name = slot.name if isinstance(slot, Slot) else slot
        slots_by_name = self.get_slots_by_name()

        current = slots_by_name.get(name)
        if current is None:
            return
        # a different slot row that merely shares the name is not linked here
        if isinstance(slot, Slot) and current is not slot and (slot.id is None or slot.id != current.id):
            return

        if current in self.slots:
            self.slots.remove(current)
        del slots_by_name[name]
        logger.debug(f"Unlinked slot '{name}' from {self!r}")

    def add_slot(self, slot: Slot) -> None:
        """Link a slot to this record. Does nothing if a slot of that name is already linked."""
        if self.has_slot(slot.name):
            return

        self.slots.append(slot)
        self.get_slots_by_name()[slot.name] = slot
        logger.debug(f"Linked slot '{slot.name}' to {self!r}")

    def create_slot(self, name: str, type: Optional[str] = None, default_value: Optional[str] = None) -> Slot:
        """
        Return the slot called ``name``, creating and linking it when missing.

        :param name: the name of the slot to get or create
        :param type: the field type of a new slot, "Text" when not given
        :param default_value: initial value of a new slot
        :raises SlotFieldConflictError: if the record already has a field called ``name``
        """
        if self.has_slot(name):
            return self.get_slot(name)

        if self.has_field(name):
            raise SlotFieldConflictError(
                f'Slot cannot be created for field "{name}" - a field of that name already exists.'
            )

        slot = Slot(
            name=name,
            type=type if type is not None else DEFAULT_SLOT_TYPE,
            value=default_value,
        )

        session = object_session(self)
        if session is not None:
            session.add(slot)
            session.flush()

        self.add_slot(slot)
        logger.info(f"Created slot '{name}' ({slot.type}) on {self!r}")
        return slot

    def has_field(self, name: str) -> bool:
        """
        Whether ``name`` is already a field of this model.

        Mapped attributes, fields of a ``<Model>Translation`` companion model and
        other class attributes (properties, hybrids, methods) all count. Slots don't.
        """
        cls = self.__class__
        mapper = inspect(cls)
        result = name in mapper.attrs

        if not result:
            translation = _find_mapped_class(mapper.registry, f"{cls.__name__}Translation")
            if translation is not None:
                result = name in inspect(translation).attrs

        if not result:
            result = hasattr(cls, name)

            # we're not counting slots as fields here
            if self.has_slot(name):
                result = False

        return result

    def get_slot_value(self, name: str) -> Any:
        slot = self.get_slot(name)
        if slot is None:
            raise UnknownSlotError(f"Unknown slot '{name}' on {self.__class__.__name__}")
        return slot.value

    def set_slot_value(self, name: str, value: Any) -> None:
        slot = self.get_slot(name)
        if slot is None:
            raise UnknownSlotError(f"Unknown slot '{name}' on {self.__class__.__name__}")
        slot.value = value

    @classmethod
    def add_slot_query_join(
        cls,
        query: Optional[Query] = None,
        slots_alias: str = "a",
        session: Optional[Session] = None,
    ) -> Query:
        """
        Left join the slots onto a query and load them into each record's ``slots``.

        Use this to fetch records whose slots can be read without extra queries.
        Without ``query`` a new one is started from ``session`` with root alias "c".

        :raises SlotAliasConflictError: if ``slots_alias`` is the query's root alias
        """
        if query is None:
            if session is None:
                raise SlotError("A session is required to build a slots query")
            query = session.query(aliased(cls, name="c"))

        root = query.column_descriptions[0]["entity"]
        root_alias = _root_alias(root)
        if root_alias == slots_alias:
            raise SlotAliasConflictError(
                f'The root alias "{root_alias}" cannot match the Slots alias "{slots_alias}"'
            )

        slot_entity = aliased(Slot, name=slots_alias)
        return query.outerjoin(root.slots.of_type(slot_entity)).options(
            contains_eager(root.slots.of_type(slot_entity))
        )
