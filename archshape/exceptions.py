"""Custom exceptions for the archshape package."""


class ArchShapeError(Exception):
    """Base exception for archshape package."""

    pass


class StateDefinitionError(ArchShapeError):
    """Cell type property definition is invalid."""

    pass


class TooManyProperties(StateDefinitionError):
    """More than four property slots declared for one cell type."""

    pass


class CombinationLimitExceeded(StateDefinitionError):
    """Slot cardinalities of a cell type multiply to more than 16."""

    pass


class MeshLoadError(ArchShapeError):
    """Failed to load or parse a mesh resource."""

    pass


class MeshResourceNotFound(MeshLoadError, LookupError):
    """No mesh resource is known under the requested name."""

    def __init__(self, name: str, detail: str = ""):
        self.name = name
        message = f"Mesh resource '{name}' not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
