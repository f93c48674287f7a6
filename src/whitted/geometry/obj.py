"""Wavefront OBJ reader for triangle meshes.

Only the records needed for triangle meshes are read:

    v x y z          vertex position
    vn x y z         vertex normal
    f a b c          triangle, vertex indices only
    f a/t b/t c/t    triangle with texture indices (texture indices ignored)
    f a//n b//n c//n triangle with normal indices
    f a/t/n ...      triangle with texture and normal indices

OBJ indices are 1-based (negative values count back from the end of the list
read so far); they are converted to 0-based here. Indices that point outside
the lists are kept as they are so the intersection routine can skip those
faces. Comments, unknown keywords, unparsable numbers and faces that are not
triangles are ignored.

Example:
    >>> from src.whitted.geometry.obj import parse_obj
    >>> mesh = parse_obj(["v 0 0 0", "v 1 0 0", "v 0 1 0", "f 1 2 3"])
    >>> mesh.face_count
    1
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class MeshData:
    """Raw mesh lists as read from an OBJ file.

    Attributes:
        vertices: Vertex positions, shape (V, 3).
        normals: Vertex normals, shape (N, 3).
        face_vertices: 0-based vertex indices per face, shape (F, 3).
        face_normals: 0-based normal indices per face, shape (F, 3). Rows of
            faces without normal indices are -1.
        face_has_normals: Whether each face carried normal indices, shape (F,).
    """

    vertices: npt.NDArray[np.float64]
    normals: npt.NDArray[np.float64]
    face_vertices: npt.NDArray[np.int64]
    face_normals: npt.NDArray[np.int64]
    face_has_normals: npt.NDArray[np.bool_]

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def normal_count(self) -> int:
        return int(self.normals.shape[0])

    @property
    def face_count(self) -> int:
        return int(self.face_vertices.shape[0])

    def invalid_face_count(self) -> int:
        """Number of faces referencing a vertex or normal outside the lists."""
        if self.face_count == 0:
            return 0
        bad_vertex = np.any(
            (self.face_vertices < 0) | (self.face_vertices >= self.vertex_count), axis=1
        )
        bad_normal = self.face_has_normals & np.any(
            (self.face_normals < 0) | (self.face_normals >= self.normal_count), axis=1
        )
        return int(np.count_nonzero(bad_vertex | bad_normal))

    @classmethod
    def from_lists(
        cls,
        vertices: list[tuple[float, float, float]],
        faces: list[tuple[int, int, int]],
        normals: list[tuple[float, float, float]] | None = None,
        face_normals: list[tuple[int, int, int] | None] | None = None,
    ) -> MeshData:
        """Build mesh data from plain Python lists of 0-based indices."""
        normals = normals or []
        if face_normals is None:
            face_normals = [None] * len(faces)
        if len(face_normals) != len(faces):
            raise ValueError(
                f"face_normals has {len(face_normals)} entries for {len(faces)} faces"
            )
        return cls(
            vertices=np.asarray(vertices, dtype=np.float64).reshape(-1, 3),
            normals=np.asarray(normals, dtype=np.float64).reshape(-1, 3),
            face_vertices=np.asarray(faces, dtype=np.int64).reshape(-1, 3),
            face_normals=np.asarray(
                [fn if fn is not None else (-1, -1, -1) for fn in face_normals],
                dtype=np.int64,
            ).reshape(-1, 3),
            face_has_normals=np.asarray(
                [fn is not None for fn in face_normals], dtype=np.bool_
            ),
        )


def _resolve_index(token: str, count: int) -> int:
    """Convert one OBJ index to 0-based. Raises ValueError if not an integer."""
    index = int(token)
    if index < 0:
        return count + index
    return index - 1


def _parse_vector(parts: list[str]) -> tuple[float, float, float]:
    if len(parts) < 4:
        raise ValueError("expected three components")
    return float(parts[1]), float(parts[2]), float(parts[3])


def _parse_face(
    parts: list[str], vertex_count: int, normal_count: int
) -> tuple[tuple[int, int, int], tuple[int, int, int] | None]:
    corners = parts[1:]
    if len(corners) != 3:
        raise ValueError(f"expected 3 vertices, got {len(corners)}")

    vertex_indices = []
    normal_indices = []
    for corner in corners:
        fields = corner.split("/")
        vertex_indices.append(_resolve_index(fields[0], vertex_count))
        if len(fields) >= 3 and fields[2]:
            normal_indices.append(_resolve_index(fields[2], normal_count))

    if normal_indices and len(normal_indices) != 3:
        raise ValueError("normal indices given for only some vertices")

    face = (vertex_indices[0], vertex_indices[1], vertex_indices[2])
    face_normal = None
    if normal_indices:
        face_normal = (normal_indices[0], normal_indices[1], normal_indices[2])
    return face, face_normal


def parse_obj(lines: Iterable[str], source: str = "<obj>") -> MeshData:
    """Parse OBJ records into mesh data.

    Args:
        lines: The lines of an OBJ file.
        source: Name used in log messages.

    Returns:
        The parsed MeshData. Malformed and unrecognized lines are skipped.
    """
    vertices: list[tuple[float, float, float]] = []
    normals: list[tuple[float, float, float]] = []
    faces: list[tuple[int, int, int]] = []
    face_normals: list[tuple[int, int, int] | None] = []
    ignored = 0

    for line_number, raw in enumerate(lines, start=1):
        parts = raw.split()
        if not parts or parts[0].startswith("#"):
            continue

        keyword = parts[0]
        try:
            if keyword == "v":
                vertices.append(_parse_vector(parts))
            elif keyword == "vn":
                normals.append(_parse_vector(parts))
            elif keyword == "f":
                face, face_normal = _parse_face(parts, len(vertices), len(normals))
                faces.append(face)
                face_normals.append(face_normal)
            else:
                ignored += 1
                logger.debug("%s:%d: ignoring record %r", source, line_number, keyword)
        except ValueError as e:
            ignored += 1
            logger.debug("%s:%d: ignoring malformed %r record: %s", source, line_number, keyword, e)

    mesh = MeshData.from_lists(vertices, faces, normals, face_normals)
    logger.info(
        "Read %s: %d vertices, %d normals, %d faces (%d lines ignored)",
        source,
        mesh.vertex_count,
        mesh.normal_count,
        mesh.face_count,
        ignored,
    )
    return mesh


def load_obj(path: str | Path) -> MeshData:
    """Read an OBJ file from disk."""
    path = Path(path)
    with path.open(encoding="utf-8", errors="replace") as f:
        return parse_obj(f, source=str(path))
