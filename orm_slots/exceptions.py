"""Exceptions raised by the slot behaviour."""


class SlotError(Exception):
    """Base exception for all slot errors."""


class SlotFieldConflictError(SlotError, ValueError):
    """A slot cannot be created because the host already has a field of that name."""


class SlotAliasConflictError(SlotError, ValueError):
    """The alias requested for the slots join is already the query's root alias."""


class UnknownSlotError(SlotError, KeyError):
    """The host record has no slot of the requested name."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""
