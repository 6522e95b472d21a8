"""
Path and ordinal resolution for flattened nodes.

Each visited node gets:
- Path: slash-joined ancestor chain ending in its own name
- ExecutionOrdinal: 1-based counter per (ParentPath, Name, Kind)
- CanonicalKey: Path + "|" + ExecutionOrdinal

State is two depth-indexed stacks (open group scopes and their path
segments) plus the counter map, all owned by one resolver instance. Use a
fresh resolver per extraction run.

Gap-filling: when a node sits deeper than the open scopes reach, the missing
ancestor levels are filled with a placeholder segment ("Unknown"). This is a
heuristic for sparse source trees, not a validated reconstruction of the
skipped ancestors.
"""

from dataclasses import dataclass

from src.domain.constants import KEY_SEPARATOR, PATH_SEPARATOR, PLACEHOLDER_SEGMENT
from src.domain.schemas import NodeKind


@dataclass(frozen=True)
class ResolvedIdentity:
    """Identity assigned to one node."""
    parent_path: str
    path: str
    ordinal: int
    canonical_key: str


class _PlaceholderScope:
    """Scope marker for a synthesized ancestor level."""

    def __repr__(self) -> str:
        return "<placeholder scope>"


class PathOrdinalResolver:
    """
    Assign stable paths and ordinals during a single traversal.

    Usage:
        resolver = PathOrdinalResolver()
        for node in nodes:
            identity = resolver.resolve(node.name, node.kind, node.depth, node.node_id)
    """

    def __init__(self, placeholder_segment: str = PLACEHOLDER_SEGMENT):
        """
        Args:
            placeholder_segment: Path segment used for skipped depths
        """
        self.placeholder_segment = placeholder_segment
        self._scopes: list[object] = []
        self._segments: list[str] = []
        self._counters: dict[str, int] = {}

    @property
    def counters(self) -> dict[str, int]:
        """Snapshot of the ordinal counter map."""
        return dict(self._counters)

    @property
    def depth(self) -> int:
        """Number of open group scopes."""
        return len(self._scopes)

    def resolve(
        self,
        name: str,
        kind: NodeKind | str,
        depth: int,
        marker: object = None,
    ) -> ResolvedIdentity:
        """
        Resolve one node visited at the given depth.

        Args:
            name: Display name of the node
            kind: Node kind (Group / Step / Measurement)
            depth: Traversal depth, 0 for the top-level container
            marker: Opaque scope marker for groups (e.g. the node id)

        Returns:
            ResolvedIdentity
        """
        if depth < 0:
            raise ValueError(f"depth must be >= 0, got {depth}")

        kind_value = kind.value if isinstance(kind, NodeKind) else str(kind)

        # Ascending the tree invalidates deeper scope
        del self._scopes[depth:]
        del self._segments[depth:]

        parent_segments = self._segments + [self.placeholder_segment] * (
            depth - len(self._segments)
        )
        parent_path = PATH_SEPARATOR.join(parent_segments)
        # Segment count, not string emptiness: an empty root name still counts
        path = f"{parent_path}{PATH_SEPARATOR}{name}" if parent_segments else name

        ordinal_key = KEY_SEPARATOR.join((parent_path, name, kind_value))
        ordinal = self._counters.get(ordinal_key, 0) + 1
        self._counters[ordinal_key] = ordinal

        if kind_value == NodeKind.GROUP.value:
            self._open_scope(name, depth, marker)

        return ResolvedIdentity(
            parent_path=parent_path,
            path=path,
            ordinal=ordinal,
            canonical_key=f"{path}{KEY_SEPARATOR}{ordinal}",
        )

    def _open_scope(self, name: str, depth: int, marker: object) -> None:
        # resolve() already truncated the stacks to depth; only gaps remain
        while len(self._scopes) < depth:
            self._scopes.append(_PlaceholderScope())
            self._segments.append(self.placeholder_segment)
        self._scopes.append(marker if marker is not None else object())
        self._segments.append(name)
