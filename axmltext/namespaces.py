from typing import List, Optional, Tuple


class NamespaceScope:
    """
    Currently active namespace declarations, as `(uri, prefix)` pairs of
    string pool references.

    Lookups and removals always use the most recently pushed binding for a
    uri, so a namespace declared again in an inner scope shadows the outer
    declaration until the inner one ends.
    """

    def __init__(self) -> None:
        self._bindings: List[Tuple[int, int]] = []

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self):
        return "<NamespaceScope bindings={}>".format(self._bindings)

    def push(self, uri: int, prefix: int) -> None:
        self._bindings.append((uri, prefix))

    def pop(self, uri: int) -> bool:
        """
        Remove the most recently pushed binding for `uri`.

        :returns: `False` if `uri` was not bound
        """
        for i in range(len(self._bindings) - 1, -1, -1):
            if self._bindings[i][0] == uri:
                del self._bindings[i]
                return True
        return False

    def resolve(self, uri: int) -> Optional[int]:
        """
        Return the prefix reference bound to `uri`, or `None` if unbound.
        """
        for key, prefix in reversed(self._bindings):
            if key == uri:
                return prefix
        return None

    def bindings(self) -> List[Tuple[int, int]]:
        """
        A copy of the active bindings, outermost first.
        """
        return list(self._bindings)
