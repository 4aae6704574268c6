from __future__ import annotations


class SurrogateIdentityMixin:
    """
    Equality by surrogate id once the row has been assigned one.

    Transient (unsaved) instances are only equal to themselves.
    """

    def __eq__(self, other) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return NotImplemented
        return self.id is not None and self.id == other.id

    def __ne__(self, other) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    # Constant per class: the id is assigned at flush and a hash must not change
    # while the instance sits in a set. All rows of a class share one bucket, so
    # keep large collections in lists or keyed by id.
    def __hash__(self) -> int:
        return hash(type(self))
