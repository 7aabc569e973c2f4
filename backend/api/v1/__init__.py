from . import entrypoints, well_known

__all__ = [
    "entrypoints",
    "well_known",
]
