"""Vector path flattening.

Turns SVG-style path data (the ``d`` mini-language used by the host for
vector networks) into polyline contours, and provides fallback outlines for
primitive shapes that carry no path data.

Supported commands (absolute upper case, relative lower case):

- ``M/m`` move, ``L/l`` line, ``H/h`` / ``V/v`` horizontal / vertical line
- ``C/c`` cubic, ``S/s`` smooth cubic, ``Q/q`` quadratic, ``T/t`` smooth quadratic
- ``A/a`` elliptical arc, ``Z/z`` close

Curves are flattened by recursive bisection until the control points lie
within ``curve_tolerance`` of the chord segment; arcs use a segment count chosen so
the chord error stays within ``arc_tolerance``.
"""

import math
import re

from collidify.config import FlattenConfig
from collidify.core._bezier import flatten_cubic, flatten_quadratic
from collidify.domain import ORIGIN, Contour, NodeType, Point, SceneNode
from collidify.domain.scene import BOX_FALLBACK_TYPES
from collidify.exceptions import ContourError, PathSyntaxError, UnsupportedGeometryError

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_COMMANDS = frozenset("MmLlHhVvCcSsQqTtAaZz")
_SEPARATORS = frozenset(" \t\r\n\f,")

_CUBIC_FAMILY = frozenset("CS")
_QUADRATIC_FAMILY = frozenset("QT")

PathCommand = tuple[str, tuple[float, ...]]


class _PathScanner:
    """Cursor over path data that reads commands, numbers and arc flags."""

    def __init__(self, data: str) -> None:
        self.data = data
        self.pos = 0

    def _skip_separators(self) -> None:
        while self.pos < len(self.data) and self.data[self.pos] in _SEPARATORS:
            self.pos += 1

    def at_end(self) -> bool:
        self._skip_separators()
        return self.pos >= len(self.data)

    def read_command(self) -> str:
        self._skip_separators()
        char = self.data[self.pos]
        if char not in _COMMANDS:
            raise PathSyntaxError(self.data, self.pos, f"expected a command, found {char!r}")
        self.pos += 1
        return char

    def has_number(self) -> bool:
        self._skip_separators()
        return _NUMBER_RE.match(self.data, self.pos) is not None

    def read_number(self) -> float:
        self._skip_separators()
        match = _NUMBER_RE.match(self.data, self.pos)
        if match is None:
            raise PathSyntaxError(self.data, self.pos, "expected a number")
        self.pos = match.end()
        return float(match.group())

    def read_flag(self) -> float:
        # Arc flags are single digits and may be written without separators ("a5 5 0 01 10 10")
        self._skip_separators()
        if self.pos >= len(self.data) or self.data[self.pos] not in "01":
            raise PathSyntaxError(self.data, self.pos, "expected an arc flag (0 or 1)")
        flag = float(self.data[self.pos])
        self.pos += 1
        return flag


_ARG_COUNTS = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2}


def parse_path(data: str) -> list[PathCommand]:
    """Tokenize path data into (command, arguments) pairs.

    Implicit repetition is expanded, so ``"M0 0 10 0 10 10"`` yields one
    move followed by two line-tos.

    Raises:
        PathSyntaxError: If the data is malformed
    """
    scanner = _PathScanner(data)
    commands: list[PathCommand] = []

    while not scanner.at_end():
        command = scanner.read_command()
        upper = command.upper()

        if upper == "Z":
            commands.append((command, ()))
            continue

        first = True
        while first or scanner.has_number():
            if upper == "A":
                args = (
                    scanner.read_number(),
                    scanner.read_number(),
                    scanner.read_number(),
                    scanner.read_flag(),
                    scanner.read_flag(),
                    scanner.read_number(),
                    scanner.read_number(),
                )
            else:
                args = tuple(scanner.read_number() for _ in range(_ARG_COUNTS[upper]))
            commands.append((command, args))
            first = False

            # Extra coordinate pairs after a move are line-tos
            if upper == "M":
                command = "l" if command == "m" else "L"
                upper = "L"

    return commands


def arc_segment_count(radius: float, sweep: float, tolerance: float, max_segments: int) -> int:
    """Segments needed so an arc's chord error stays within tolerance.

    Solves ``tolerance = radius * (1 - cos(step / 2))`` for the angular step.
    """
    if radius <= 0 or sweep <= 0:
        return 1
    ratio = max(-1.0, min(1.0, 1.0 - tolerance / radius))
    step = 2.0 * math.acos(ratio)
    if step <= 1e-9:
        return max_segments
    return max(1, min(max_segments, math.ceil(sweep / step)))


def _vector_angle(ux: float, uy: float, vx: float, vy: float) -> float:
    return math.atan2(ux * vy - uy * vx, ux * vx + uy * vy)


def arc_points(
    start: Point,
    rx: float,
    ry: float,
    x_axis_rotation: float,
    large_arc: bool,
    sweep: bool,
    end: Point,
    tolerance: float,
    max_segments: int = 1024,
) -> list[Point]:
    """Flatten an SVG elliptical arc given in endpoint form.

    Converts to center parameterization (SVG implementation notes F.6.5),
    scaling the radii up when they cannot span the chord.

    Args:
        start: Current point
        rx: X radius
        ry: Y radius
        x_axis_rotation: Ellipse rotation in degrees
        large_arc: Large-arc flag
        sweep: Sweep flag (positive-angle direction)
        end: Arc endpoint
        tolerance: Maximum chord error
        max_segments: Upper bound on generated segments

    Returns:
        Points along the arc after start, ending exactly at end. Degenerate
        arcs (zero radius or coincident endpoints) return just [end].
    """
    rx = abs(rx)
    ry = abs(ry)
    if rx < 1e-12 or ry < 1e-12 or start.distance_to(end) < 1e-12:
        return [end]

    phi = math.radians(x_axis_rotation)
    cos_phi = math.cos(phi)
    sin_phi = math.sin(phi)

    # Step 1: midpoint-relative coordinates in the ellipse's own axes
    dx2 = (start.x - end.x) / 2
    dy2 = (start.y - end.y) / 2
    x1p = cos_phi * dx2 + sin_phi * dy2
    y1p = -sin_phi * dx2 + cos_phi * dy2

    # Radius correction
    lam = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lam > 1:
        scale = math.sqrt(lam)
        rx *= scale
        ry *= scale

    # Step 2: center in the ellipse's axes
    rx2 = rx * rx
    ry2 = ry * ry
    numerator = rx2 * ry2 - rx2 * y1p * y1p - ry2 * x1p * x1p
    denominator = rx2 * y1p * y1p + ry2 * x1p * x1p
    coef = math.sqrt(max(0.0, numerator / denominator)) if denominator > 0 else 0.0
    if large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    # Step 3: center in path coordinates
    cx = cos_phi * cxp - sin_phi * cyp + (start.x + end.x) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (start.y + end.y) / 2

    # Step 4: start angle and sweep
    ux = (x1p - cxp) / rx
    uy = (y1p - cyp) / ry
    vx = (-x1p - cxp) / rx
    vy = (-y1p - cyp) / ry
    theta1 = _vector_angle(1.0, 0.0, ux, uy)
    delta = _vector_angle(ux, uy, vx, vy)
    if not sweep and delta > 0:
        delta -= 2 * math.pi
    elif sweep and delta < 0:
        delta += 2 * math.pi

    if abs(delta) < 1e-12:
        return [end]

    segments = arc_segment_count(max(rx, ry), abs(delta), tolerance, max_segments)
    points: list[Point] = []
    for i in range(1, segments):
        theta = theta1 + delta * i / segments
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        points.append(
            Point(
                cx + rx * cos_t * cos_phi - ry * sin_t * sin_phi,
                cy + rx * cos_t * sin_phi + ry * sin_t * cos_phi,
            )
        )
    points.append(end)
    return points


class _ContourAccumulator:
    """Collects flattened points into contours, merging near-duplicates."""

    def __init__(self, epsilon: float) -> None:
        self.epsilon = epsilon
        self.contours: list[Contour] = []
        self.points: list[Point] = []

    @property
    def is_open(self) -> bool:
        return bool(self.points)

    def begin(self, point: Point) -> None:
        self.finish(closed=True)
        self.points = [point]

    def resume(self, point: Point) -> None:
        # Drawing after a close continues from the subpath start
        self.points = [point]

    def add(self, point: Point) -> None:
        if not self.points or self.points[-1].distance_to(point) > self.epsilon:
            self.points.append(point)

    def finish(self, closed: bool) -> None:
        points = self.points
        self.points = []
        if closed:
            while len(points) > 1 and points[-1].distance_to(points[0]) <= self.epsilon:
                points.pop()
        if len(points) >= 2:
            self.contours.append(Contour(points=points, closed=closed))


class PathFlattener:
    """Flattens path data into contours.

    The flattener is stateless between calls and safe to reuse.

    Example:
        flattener = PathFlattener(FlattenConfig(curve_tolerance=0.5))
        contours = flattener.flatten("M0 0 C 0 50 100 50 100 0 Z")
    """

    def __init__(self, config: FlattenConfig | None = None) -> None:
        self.config = config or FlattenConfig()

    def flatten(self, data: str) -> list[Contour]:
        """Flatten one path-data string.

        A move finishes the previous contour as closed; ``Z`` closes the
        current one; a contour left open at the end of input is emitted open.
        Contours with fewer than two distinct points are dropped.

        Raises:
            PathSyntaxError: If the data is malformed
        """
        cfg = self.config
        acc = _ContourAccumulator(cfg.point_epsilon)

        current = ORIGIN
        start = ORIGIN
        last_control: Point | None = None
        previous = ""

        def draw_to(point: Point) -> None:
            if not acc.is_open:
                acc.resume(current)
            acc.add(point)

        for command, args in parse_path(data):
            upper = command.upper()
            base = current if command.islower() else ORIGIN

            def at(i: int) -> Point:
                return Point(base.x + args[i], base.y + args[i + 1])

            def reflected(family: frozenset[str]) -> Point:
                if previous in family and last_control is not None:
                    return Point(2 * current.x - last_control.x, 2 * current.y - last_control.y)
                return current

            if upper == "M":
                target = at(0)
                acc.begin(target)
                start = target
                last_control = None
            elif upper == "L":
                target = at(0)
                draw_to(target)
                last_control = None
            elif upper == "H":
                target = Point(base.x + args[0], current.y)
                draw_to(target)
                last_control = None
            elif upper == "V":
                target = Point(current.x, base.y + args[0])
                draw_to(target)
                last_control = None
            elif upper in ("C", "S"):
                if upper == "C":
                    c1, c2, target = at(0), at(2), at(4)
                else:
                    c1, c2, target = reflected(_CUBIC_FAMILY), at(0), at(2)
                for point in flatten_cubic(
                    [current, c1, c2, target], cfg.curve_tolerance, cfg.max_recursion_depth
                )[1:]:
                    draw_to(point)
                last_control = c2
            elif upper in ("Q", "T"):
                if upper == "Q":
                    control, target = at(0), at(2)
                else:
                    control, target = reflected(_QUADRATIC_FAMILY), at(0)
                for point in flatten_quadratic(
                    [current, control, target], cfg.curve_tolerance, cfg.max_recursion_depth
                )[1:]:
                    draw_to(point)
                last_control = control
            elif upper == "A":
                target = at(5)
                for point in arc_points(
                    current,
                    args[0],
                    args[1],
                    args[2],
                    bool(args[3]),
                    bool(args[4]),
                    target,
                    cfg.arc_tolerance,
                    cfg.max_arc_segments,
                ):
                    draw_to(point)
                last_control = None
            else:  # Z
                if acc.is_open:
                    acc.add(start)
                    acc.finish(closed=True)
                target = start
                last_control = None

            current = target
            previous = upper

        acc.finish(closed=False)
        return acc.contours


def flatten_path(data: str, config: FlattenConfig | None = None) -> list[Contour]:
    """Flatten path data with the given (or default) tolerances."""
    return PathFlattener(config).flatten(data)


def rectangle_outline(width: float, height: float) -> list[Point]:
    """Corners of a width x height box, in local coordinates."""
    return [Point(0.0, 0.0), Point(width, 0.0), Point(width, height), Point(0.0, height)]


def ellipse_outline(width: float, height: float, config: FlattenConfig | None = None) -> list[Point]:
    """Polygon approximating the ellipse inscribed in a width x height box.

    Uses the arc chord-error rule with at least ``min_ellipse_segments``.
    """
    cfg = config or FlattenConfig()
    rx = width / 2
    ry = height / 2
    segments = max(
        cfg.min_ellipse_segments,
        arc_segment_count(max(rx, ry), 2 * math.pi, cfg.arc_tolerance, cfg.max_arc_segments),
    )
    return [
        Point(
            rx + rx * math.cos(2 * math.pi * i / segments),
            ry + ry * math.sin(2 * math.pi * i / segments),
        )
        for i in range(segments)
    ]


def node_contours(node: SceneNode, config: FlattenConfig | None = None) -> list[Contour]:
    """All contours of a node, in node-local coordinates.

    Path data wins; otherwise boxes and ellipses fall back to their outline.

    Raises:
        UnsupportedGeometryError: If the node has no path data and no
            recognized fallback shape
        PathSyntaxError: If a path string is malformed
    """
    if node.vector_paths:
        flattener = PathFlattener(config)
        contours: list[Contour] = []
        for data in node.vector_paths:
            contours.extend(flattener.flatten(data))
        return contours

    if node.has_size and node.node_type in BOX_FALLBACK_TYPES:
        return [Contour(points=rectangle_outline(node.width, node.height), closed=True)]

    if node.has_size and node.node_type is NodeType.ELLIPSE:
        return [Contour(points=ellipse_outline(node.width, node.height, config), closed=True)]

    raise UnsupportedGeometryError(node.name, node.type_name)


def select_contour(contours: list[Contour]) -> Contour:
    """Pick the contour that best represents a shape.

    Prefers the closed contour with the largest bounding-box area, then the
    longest open contour.

    Raises:
        ContourError: If there are no contours
    """
    closed = [c for c in contours if c.closed]
    if closed:
        return max(closed, key=lambda c: c.bounding_box_area())
    if contours:
        return max(contours, key=lambda c: c.length())
    raise ContourError("Path data contains no drawable contour")


def world_polygon_vertices(node: SceneNode, config: FlattenConfig | None = None) -> list[Point]:
    """The node's representative outline, mapped into world space."""
    contour = select_contour(node_contours(node, config))
    matrix = node.world_transform
    return [matrix.apply(p) for p in contour.points]
