"""Exception taxonomy for hierarchy operations.

Every error raised by the hierarchy engine derives from HierarchyError and
follows RFC 7807 problem-details fields, so a surrounding API layer can render
them without knowing the concrete class.
"""

from __future__ import annotations

from typing import Any


class HierarchyError(Exception):
    """Base hierarchy exception.

    Attributes:
        status_code: HTTP-style status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        extra: Additional context-specific information about the error.

    Example:
            raise HierarchyError(
            status_code=409,
            detail="Node already registered with given name B",
            type="node-already-exists",
            extra={"name": "B"},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize hierarchy exception.

        Args:
            status_code: HTTP-style status code.
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            extra: Additional context about the error.
        """
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title for a status code."""
        titles = {
            400: "Bad Request",
            404: "Not Found",
            409: "Conflict",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")

    def to_problem(self) -> dict[str, Any]:
        """Render the error as a problem-details dict."""
        return {
            "type": self.type,
            "title": self.title,
            "status": self.status_code,
            "detail": self.detail,
            **self.extra,
        }


class NodeNotFoundError(HierarchyError):
    """A node name did not resolve to an existing node.

    Example:
            raise NodeNotFoundError("A")
    """

    def __init__(self, name: str, extra: dict[str, Any] | None = None) -> None:
        """Initialize not found error.

        Args:
            name: The node name that was looked up.
            extra: Additional context about the error.
        """
        self.name = name
        super().__init__(
            status_code=404,
            detail=f"Node not found with name={name!r}",
            type="node-not-found",
            title="Not Found",
            extra={"name": name, **(extra or {})},
        )


class NodeAlreadyExistsError(HierarchyError):
    """A node with the requested name already exists."""

    def __init__(
        self,
        detail: str,
        type: str = "node-already-exists",
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize already exists error.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            extra: Additional context about the error.
        """
        super().__init__(
            status_code=409,
            detail=detail,
            type=type,
            title="Conflict",
            extra=extra,
        )

    @classmethod
    def for_name(cls, name: str) -> NodeAlreadyExistsError:
        """Build the name-collision variant."""
        return cls(
            detail=f"Node already registered with given name {name}",
            extra={"name": name},
        )


class NodeAlreadyUnderParentError(NodeAlreadyExistsError):
    """A move targeted the node's current immediate parent.

    Kept as a subclass of NodeAlreadyExistsError so callers that only know
    the name-collision kind still treat it as a rejected request.
    """

    def __init__(self, name: str, parent_name: str) -> None:
        self.name = name
        self.parent_name = parent_name
        super().__init__(
            detail=f"Node {name!r} is already under parent {parent_name!r}",
            type="node-already-under-parent",
            extra={"name": name, "parent": parent_name},
        )


class InvalidMoveError(HierarchyError):
    """A move would break the tree shape (cycle, self-parenting, moving the root)."""

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            type="invalid-move",
            extra=extra,
        )


class InvalidNodeNameError(HierarchyError):
    """A node name is empty or too long."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(
            status_code=400,
            detail=f"Invalid node name {name!r}: {reason}",
            type="invalid-node-name",
            extra={"name": name, "reason": reason},
        )


class StorageFailureError(HierarchyError):
    """The underlying store failed while a unit of work was open.

    The unit of work has already been rolled back when this is raised; the
    original driver error is chained as ``__cause__``.
    """

    def __init__(self, detail: str, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(
            status_code=503,
            detail=detail,
            type="storage-failure",
            extra={"operation": operation} if operation else None,
        )


__all__ = [
    "HierarchyError",
    "InvalidMoveError",
    "InvalidNodeNameError",
    "NodeAlreadyExistsError",
    "NodeAlreadyUnderParentError",
    "NodeNotFoundError",
    "StorageFailureError",
]
