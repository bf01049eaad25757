"""Map graph model -- points, nodes, and the layered map with its path.

Edges are stored as lists of :class:`Point` on the source node, never as
object references, so a :class:`GameMap` serialises to an acyclic JSON
document and round-trips exactly.  Incoming edges are derived on demand.

A map is validated whenever it is constructed or parsed:

- every edge goes from layer y to layer y+1 (acyclic by construction)
- no dead ends below the terminal layer
- no unreachable nodes above layer 0
- exactly one Boss node in the terminal layer (the stage boss)
- the path starts on layer 0 and follows edges
"""

from __future__ import annotations

from collections import defaultdict

from pydantic import BaseModel, ConfigDict, PrivateAttr, model_validator

from stage_map.ir.blueprints import NodeType


class Point(BaseModel):
    """Grid coordinate of a node: ``y`` is the layer, ``x`` the slot."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class Node(BaseModel):
    """A single map node, identified by its point."""

    point: Point
    node_type: NodeType
    blueprint_id: str
    outgoing: list[Point] = []
    """Points on the next layer this node connects to, in insertion order."""

    position: tuple[float, float] = (0.0, 0.0)
    """Presentation coordinates (jittered layout), not used for logic."""

    instance_id: str = ""
    """Unique per placement; lets progression tell repeat blueprints apart."""

    def add_outgoing(self, point: Point) -> bool:
        """Connect to *point*.  Returns False if already connected."""
        if point in self.outgoing:
            return False
        self.outgoing.append(point)
        return True

    def connects_to(self, point: Point) -> bool:
        return point in self.outgoing


class GameMap(BaseModel):
    """A generated map and the player's path through it.

    ``path`` is the only part that changes during play; it only ever
    grows.  A new stage gets a new ``GameMap`` rather than a mutated one.
    """

    name: str = "map"
    nodes: list[Node]
    path: list[Point] = []

    # Point -> Node, filled in by the validator.
    _index: dict[Point, Node] = PrivateAttr(default_factory=dict)

    # -- lookups ------------------------------------------------------------

    def get_node(self, point: Point) -> Node | None:
        """Return the node at *point*, or ``None``."""
        return self._index.get(point)

    @property
    def top_layer(self) -> int:
        """Index of the terminal layer."""
        return max(node.point.y for node in self.nodes)

    @property
    def layer_count(self) -> int:
        return self.top_layer + 1

    def layer(self, y: int) -> list[Node]:
        """Return the nodes on layer *y*, ordered by x."""
        return sorted(
            (node for node in self.nodes if node.point.y == y),
            key=lambda n: n.point.x,
        )

    def incoming(self, point: Point) -> list[Point]:
        """Return the points with an edge into *point*."""
        return [node.point for node in self.nodes if point in node.outgoing]

    def edges(self) -> list[tuple[Point, Point]]:
        """Return every ``(source, target)`` edge."""
        return [(node.point, target) for node in self.nodes for target in node.outgoing]

    def edge_count(self) -> int:
        return sum(len(node.outgoing) for node in self.nodes)

    # -- path queries -------------------------------------------------------

    def current_point(self) -> Point | None:
        """The last visited point, or ``None`` before the first move."""
        return self.path[-1] if self.path else None

    def attainable_points(self) -> list[Point]:
        """Points the player may move to next.

        Before the first move that is the whole of layer 0; afterwards the
        outgoing edges of the current node.
        """
        current = self.current_point()
        if current is None:
            return [node.point for node in self.layer(0)]
        node = self.get_node(current)
        return list(node.outgoing) if node is not None else []

    def stage_boss_node(self) -> Node | None:
        """Return the Boss node on the terminal layer."""
        for node in self.layer(self.top_layer):
            if node.node_type == NodeType.BOSS:
                return node
        return None

    def is_stage_complete(self) -> bool:
        """True once the stage boss has been reached."""
        boss = self.stage_boss_node()
        return boss is not None and boss.point in self.path

    # -- validation ---------------------------------------------------------

    @model_validator(mode="after")
    def _validate_graph(self) -> "GameMap":
        """Reject maps that break the layering, coverage, boss, or path
        invariants."""
        if not self.nodes:
            raise ValueError("A map needs at least one node")

        errors: list[str] = []
        index: dict[Point, Node] = {}
        for node in self.nodes:
            if node.point in index:
                errors.append(f"duplicate node at {node.point}")
            index[node.point] = node

        top = max(p.y for p in index)
        per_layer: dict[int, int] = defaultdict(int)
        for point in index:
            per_layer[point.y] += 1
        for y in range(top + 1):
            if per_layer[y] == 0:
                errors.append(f"layer {y} has no nodes")
        if min(p.y for p in index) < 0:
            errors.append("negative layer index")

        has_incoming: set[Point] = set()
        for node in self.nodes:
            if len(set(node.outgoing)) != len(node.outgoing):
                errors.append(f"{node.point} has duplicate outgoing edges")
            for target in node.outgoing:
                if target.y != node.point.y + 1:
                    errors.append(f"edge {node.point} -> {target} skips or reverses layers")
                elif target not in index:
                    errors.append(f"edge {node.point} -> {target} targets a missing node")
                else:
                    has_incoming.add(target)
            if node.point.y < top and not node.outgoing:
                errors.append(f"{node.point} is a dead end")

        for point in index:
            if point.y > 0 and point not in has_incoming:
                errors.append(f"{point} is unreachable")

        bosses = [n for n in self.nodes if n.point.y == top and n.node_type == NodeType.BOSS]
        if len(bosses) != 1:
            errors.append(
                f"terminal layer must hold exactly one Boss node, found {len(bosses)}"
            )

        errors.extend(self._path_errors(index))

        if errors:
            raise ValueError(
                f"Invalid map with {len(errors)} error(s):\n"
                + "\n".join(f"  - {e}" for e in errors)
            )
        self._index = index
        return self

    def _path_errors(self, index: dict[Point, Node]) -> list[str]:
        if not self.path:
            return []
        errors: list[str] = []
        if self.path[0].y != 0:
            errors.append(f"path starts at {self.path[0]}, not on layer 0")
        for point in self.path:
            if point not in index:
                errors.append(f"path visits missing node {point}")
        for prev, nxt in zip(self.path, self.path[1:]):
            source = index.get(prev)
            if source is None or nxt not in source.outgoing:
                errors.append(f"path step {prev} -> {nxt} does not follow an edge")
        return errors
