"""In-memory registry of compiled artifacts keyed by filename."""

from __future__ import annotations

import copy
import json
import logging
import os
from typing import Any, Dict, List, Optional

from .exceptions import ArtifactParseError

logger = logging.getLogger(__name__)

Artifact = Dict[str, Any]

# Slot value for a file that exists but could not be parsed
PLACEHOLDER = None


def decorate_artifact(artifact: Artifact, network_id: Optional[str]) -> Artifact:
    """
    Copy the deployment of ``network_id`` to top-level fields.

    Adds ``address`` and ``creationTxHash`` when the artifact has an entry
    for the network; leaves the artifact untouched otherwise.
    """
    if network_id is None:
        return artifact
    networks = artifact.get("networks")
    if not isinstance(networks, dict):
        return artifact
    deployment = networks.get(str(network_id))
    if isinstance(deployment, dict):
        artifact["address"] = deployment.get("address")
        artifact["creationTxHash"] = deployment.get("transactionHash")
    return artifact


def read_artifact(path: str, network_id: Optional[str] = None) -> Artifact:
    """
    Read and parse one artifact file.

    Args:
        path: Path to the artifact JSON file
        network_id: Network used for address decoration

    Returns:
        Parsed artifact

    Raises:
        ArtifactParseError: If the file can't be read or isn't a JSON object
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            artifact = json.load(f)
    except (OSError, ValueError) as e:
        raise ArtifactParseError(f"Could not parse artifact {path}: {e}", e, path=path) from e

    if not isinstance(artifact, dict):
        raise ArtifactParseError(f"Artifact {path} is not a JSON object", path=path)

    return decorate_artifact(artifact, network_id)


class ArtifactRegistry:
    """
    Dense artifact list plus a filename → position index.

    Unparseable files keep their slot as a placeholder so every indexed
    filename points at its own position. Removing a file drops exactly one
    slot and shifts the positions recorded after it.
    """

    def __init__(self, network_id: Optional[str] = None, extension: str = ".json"):
        self.network_id = None if network_id is None else str(network_id)
        self.extension = extension
        self._artifacts: List[Optional[Artifact]] = []
        self._index: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._artifacts)

    def __contains__(self, filename: str) -> bool:
        return filename in self._index

    @property
    def index(self) -> Dict[str, int]:
        return dict(self._index)

    def position(self, filename: str) -> Optional[int]:
        return self._index.get(filename)

    def get(self, filename: str) -> Optional[Artifact]:
        pos = self._index.get(filename)
        return None if pos is None else self._artifacts[pos]

    def is_artifact_file(self, filename: str) -> bool:
        return os.path.splitext(filename)[1] == self.extension

    def artifacts(self) -> List[Artifact]:
        """Deep copies of every parsed artifact, in position order."""
        return [copy.deepcopy(a) for a in self._artifacts if a is not PLACEHOLDER]

    def clear(self) -> None:
        self._artifacts = []
        self._index = {}

    def _parse(self, directory: str, filename: str) -> Optional[Artifact]:
        try:
            return read_artifact(os.path.join(directory, filename), self.network_id)
        except ArtifactParseError as e:
            logger.warning(
                "artifact_parse_failed",
                extra={"file": filename, "error": str(e)},
            )
            return PLACEHOLDER

    def add(self, filename: str, artifact: Optional[Artifact]) -> int:
        """Append an artifact (or placeholder); an indexed filename is replaced in place."""
        if filename in self._index:
            return self.replace(filename, artifact)
        self._index[filename] = len(self._artifacts)
        self._artifacts.append(artifact)
        return self._index[filename]

    def replace(self, filename: str, artifact: Optional[Artifact]) -> int:
        pos = self._index[filename]
        self._artifacts[pos] = artifact
        return pos

    def remove(self, filename: str) -> Optional[int]:
        """
        Drop the slot of ``filename`` and re-index everything after it.

        Returns:
            The removed position, or None if the filename wasn't indexed
        """
        pos = self._index.pop(filename, None)
        if pos is None:
            return None
        del self._artifacts[pos]
        for name, idx in self._index.items():
            if idx > pos:
                self._index[name] = idx - 1
        return pos

    def load_file(self, directory: str, filename: str) -> int:
        """Parse ``filename`` and store it, appending or replacing as needed."""
        return self.add(filename, self._parse(directory, filename))

    def scan(self, directory: str) -> int:
        """
        Rebuild the registry from a full listing of ``directory``.

        Returns:
            Number of slots (placeholders included)
        """
        self.clear()
        for filename in sorted(os.listdir(directory)):
            if not self.is_artifact_file(filename):
                continue
            if not os.path.isfile(os.path.join(directory, filename)):
                continue
            self.load_file(directory, filename)

        logger.info(
            "artifact_scan_complete",
            extra={
                "directory": directory,
                "files": len(self._artifacts),
                "parsed": sum(1 for a in self._artifacts if a is not PLACEHOLDER),
            },
        )
        return len(self._artifacts)


__all__ = ["PLACEHOLDER", "Artifact", "ArtifactRegistry", "decorate_artifact", "read_artifact"]
