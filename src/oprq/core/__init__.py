"""Schema resolution and artifact composition."""

from .composer import ArtifactComposer, OperationArtifact, build_artifact, compose_entry
from .naming import derive, derive_file_path
from .resolver import SchemaResolver, resolve

__all__ = [
    "ArtifactComposer",
    "OperationArtifact",
    "SchemaResolver",
    "build_artifact",
    "compose_entry",
    "derive",
    "derive_file_path",
    "resolve",
]
