"""Errors raised by sitegraph outside of graph evaluation.

Evaluation itself is total: graphs that are transiently broken while being
edited resolve to defaults instead of raising. These exceptions cover the
surrounding surface (files, templates, instance bookkeeping).
"""

from __future__ import annotations

from typing import List, Optional


class SitegraphError(Exception):
    """Base class for all sitegraph errors."""


class GraphLoadError(SitegraphError):
    """A graph or project file could not be read or parsed.

    Attributes:
        path: The file that failed to load
        reason: The underlying parser/validation message
    """

    def __init__(self, path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load '{path}': {reason}")


class UnknownTemplateError(SitegraphError):
    """Requested starter template is not shipped with the package."""

    def __init__(self, name: str, available: List[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(f"Unknown template '{name}'. Use one of: {', '.join(available)}")


class NotExposableError(SitegraphError):
    """A node kind outside the exposable allow-list was asked to become a parameter."""

    def __init__(self, node_id: str, kind: str) -> None:
        self.node_id = node_id
        self.kind = kind
        super().__init__(f"Node '{node_id}' of kind {kind} cannot be exposed as an instance parameter.")


class MissingDefinitionError(SitegraphError):
    """An element references a component or graph that does not exist."""

    def __init__(self, element_id: str, definition_id: Optional[str]) -> None:
        self.element_id = element_id
        self.definition_id = definition_id
        super().__init__(
            f"Element '{element_id}' references missing definition '{definition_id}'."
        )
