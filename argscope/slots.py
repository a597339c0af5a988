"""
Typed output handles.

A Slot is the caller-owned cell a declaration writes into: the registry stores
a reference while declaring, and the parser overwrites `value` when the
matching token is consumed. Once parse completes the registry drops every
reference it held, so the slot belongs to the caller alone.

Masks
- Flag/Bool declarations may carry a nonzero bit-mask. Masked writes treat the
  slot as an integer and set or clear only the mask's bits, which lets several
  flags share one slot:

    >>> modes = Slot(0b01)
    >>> modes.assign(True, 0b10)
    >>> modes.value
    3
"""


class Slot[_T]:
    """
    Mutable single-value cell used as the output of a parameter or argument.
    """

    __slots__ = ("value",)

    def __init__(self, value=None, /):
        self.value = value

    def assign(self, state, mask=0, /):
        """
        Store a boolean state, honouring an optional bit-mask.

        - mask == 0: value becomes bool(state).
        - mask != 0: value is read as an int (None counts as 0) and only the
          mask's bits are set (state true) or cleared (state false).
        """
        if not isinstance(mask, int) or isinstance(mask, bool):
            raise TypeError("assign() mask must be an integer")
        if not mask:
            self.value = bool(state)
            return
        current = 0 if self.value is None else int(self.value)
        self.value = current | mask if state else current & ~mask

    def __rich_repr__(self):
        yield self.value

    def __repr__(self):
        return f"Slot({self.value!r})"


__all__ = ("Slot",)
