"""SVG path data → absolute drawing commands.

The parser is a small scanner plus a pure ``apply_command`` step. Cursor
state (current point, sub-path start, last control point) lives in a frozen
``ParserState`` that each step returns a new copy of, so every command type
can be exercised on its own.

Parsing never raises: malformed operand groups are dropped with a warning,
unknown command letters are skipped along with their operands, and empty
input gives an empty list.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, replace

from onestroke.utils.geometry import Point

logger = logging.getLogger(__name__)


class CommandKind(str, enum.Enum):
    MOVE_TO = "M"
    LINE_TO = "L"
    HORIZONTAL_TO = "H"
    VERTICAL_TO = "V"
    CUBIC_TO = "C"
    SMOOTH_CUBIC_TO = "S"
    QUADRATIC_TO = "Q"
    SMOOTH_QUADRATIC_TO = "T"
    ARC_TO = "A"
    CLOSE = "Z"


COMMAND_LETTERS = frozenset("MmLlHhVvCcSsQqTtAaZz")

_ARITY = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}

_CUBIC_FAMILY = (CommandKind.CUBIC_TO, CommandKind.SMOOTH_CUBIC_TO)
_QUADRATIC_FAMILY = (CommandKind.QUADRATIC_TO, CommandKind.SMOOTH_QUADRATIC_TO)

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_SEPARATORS = " \t\r\n\f,"


class PathDataError(ValueError):
    """Malformed operand group. Always caught inside ``parse_path_data``."""


@dataclass(frozen=True)
class PathCommand:
    """One drawing command with absolute operands.

    ``end`` is where the pen is after the command; for ``Z`` that is the
    sub-path start. Smooth curves carry their reflected first control point
    in ``control1``, so consumers never need parser state.
    """

    kind: CommandKind
    end: Point
    control1: Point | None = None
    control2: Point | None = None
    radius: tuple[float, float] | None = None
    rotation: float = 0.0
    large_arc: bool = False
    sweep: bool = False
    relative: bool = False

    @property
    def control_points(self) -> tuple[Point, ...]:
        return tuple(p for p in (self.control1, self.control2) if p is not None)

    @property
    def is_curve(self) -> bool:
        return self.kind in _CUBIC_FAMILY or self.kind in _QUADRATIC_FAMILY or self.kind is CommandKind.ARC_TO


@dataclass(frozen=True)
class ParserState:
    current: Point = Point(0.0, 0.0)
    start: Point = Point(0.0, 0.0)
    last_control: Point | None = None
    last_kind: CommandKind | None = None


def _reflect(state: ParserState, family: tuple[CommandKind, ...]) -> Point:
    """Implicit first control point of S/T: mirror of the previous one, or the pen."""
    if state.last_kind in family and state.last_control is not None:
        cur = state.current
        return Point(2 * cur.x - state.last_control.x, 2 * cur.y - state.last_control.y)
    return state.current


def apply_command(
    letter: str, operands: tuple[float, ...], state: ParserState
) -> tuple[PathCommand, ParserState]:
    """Resolve one operand group against the parser state."""
    relative = letter.islower()
    kind = CommandKind(letter.upper())
    cur = state.current

    def absolute(x: float, y: float) -> Point:
        if relative:
            return Point(cur.x + x, cur.y + y)
        return Point(float(x), float(y))

    if kind is CommandKind.MOVE_TO:
        end = absolute(*operands[:2])
        cmd = PathCommand(kind, end, relative=relative)
        return cmd, ParserState(current=end, start=end, last_kind=kind)

    if kind is CommandKind.LINE_TO:
        cmd = PathCommand(kind, absolute(*operands[:2]), relative=relative)
    elif kind is CommandKind.HORIZONTAL_TO:
        x = cur.x + operands[0] if relative else operands[0]
        cmd = PathCommand(kind, Point(float(x), cur.y), relative=relative)
    elif kind is CommandKind.VERTICAL_TO:
        y = cur.y + operands[0] if relative else operands[0]
        cmd = PathCommand(kind, Point(cur.x, float(y)), relative=relative)
    elif kind is CommandKind.CUBIC_TO:
        cmd = PathCommand(
            kind,
            absolute(operands[4], operands[5]),
            control1=absolute(operands[0], operands[1]),
            control2=absolute(operands[2], operands[3]),
            relative=relative,
        )
    elif kind is CommandKind.SMOOTH_CUBIC_TO:
        cmd = PathCommand(
            kind,
            absolute(operands[2], operands[3]),
            control1=_reflect(state, _CUBIC_FAMILY),
            control2=absolute(operands[0], operands[1]),
            relative=relative,
        )
    elif kind is CommandKind.QUADRATIC_TO:
        cmd = PathCommand(
            kind,
            absolute(operands[2], operands[3]),
            control1=absolute(operands[0], operands[1]),
            relative=relative,
        )
    elif kind is CommandKind.SMOOTH_QUADRATIC_TO:
        cmd = PathCommand(
            kind,
            absolute(operands[0], operands[1]),
            control1=_reflect(state, _QUADRATIC_FAMILY),
            relative=relative,
        )
    elif kind is CommandKind.ARC_TO:
        cmd = PathCommand(
            kind,
            absolute(operands[5], operands[6]),
            radius=(abs(float(operands[0])), abs(float(operands[1]))),
            rotation=float(operands[2]),
            large_arc=bool(operands[3]),
            sweep=bool(operands[4]),
            relative=relative,
        )
    else:
        cmd = PathCommand(CommandKind.CLOSE, state.start, relative=relative)
        return cmd, replace(state, current=state.start, last_control=None, last_kind=kind)

    # Only cubic/quadratic curves leave a control point to reflect
    if kind in _CUBIC_FAMILY:
        last_control = cmd.control2
    elif kind in _QUADRATIC_FAMILY:
        last_control = cmd.control1
    else:
        last_control = None
    return cmd, replace(state, current=cmd.end, last_control=last_control, last_kind=kind)


class _Scanner:
    """Cursor over a path data string."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos]

    def advance(self) -> None:
        self.pos += 1

    def skip_separators(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _SEPARATORS:
            self.pos += 1

    def skip_token(self) -> None:
        m = _NUMBER_RE.match(self.text, self.pos)
        self.pos = m.end() if m else self.pos + 1

    def skip_to_command(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] not in COMMAND_LETTERS:
            self.pos += 1

    def read_number(self) -> float:
        self.skip_separators()
        m = _NUMBER_RE.match(self.text, self.pos)
        if not m:
            raise PathDataError(f"expected a number at offset {self.pos}")
        self.pos = m.end()
        return float(m.group(0))

    def read_flag(self) -> float:
        # Arc flags are single characters and may be packed together ("0110")
        self.skip_separators()
        if self.at_end() or self.peek() not in "01":
            raise PathDataError(f"expected an arc flag at offset {self.pos}")
        value = float(self.peek() == "1")
        self.advance()
        return value

    def read_operands(self, letter: str) -> tuple[float, ...]:
        upper = letter.upper()
        values = []
        for i in range(_ARITY[upper]):
            if upper == "A" and i in (3, 4):
                values.append(self.read_flag())
            else:
                values.append(self.read_number())
        return tuple(values)


def parse_path_data(d: str | None) -> list[PathCommand]:
    """Tokenize a ``d`` attribute into absolute commands (best effort)."""
    if not d or not d.strip():
        return []

    commands: list[PathCommand] = []
    state = ParserState()
    scanner = _Scanner(d)
    letter: str | None = None
    dropped = 0

    while True:
        scanner.skip_separators()
        if scanner.at_end():
            break
        ch = scanner.peek()

        if ch in COMMAND_LETTERS:
            scanner.advance()
            if ch in "Zz":
                cmd, state = apply_command(ch, (), state)
                commands.append(cmd)
                letter = None
            else:
                letter = ch
            continue

        if ch.isalpha():
            # Unknown command: drop it and the operands that follow
            scanner.advance()
            letter = None
            dropped += 1
            continue

        if letter is None:
            scanner.skip_token()
            dropped += 1
            continue

        start = scanner.pos
        try:
            operands = scanner.read_operands(letter)
        except PathDataError as e:
            logger.debug("Dropping '%s' group at offset %d: %s", letter, start, e)
            scanner.skip_to_command()
            letter = None
            dropped += 1
            continue

        cmd, state = apply_command(letter, operands, state)
        commands.append(cmd)
        # Extra coordinate pairs after a moveto are implicit linetos
        if letter == "M":
            letter = "L"
        elif letter == "m":
            letter = "l"

    if dropped:
        logger.warning("Path data partially parsed: %d token(s) dropped, %d command(s) kept", dropped, len(commands))
    return commands


def _fmt(value: float) -> str:
    return f"{value:.3f}".rstrip("0").rstrip(".") or "0"


def to_path_data(commands: list[PathCommand]) -> str:
    """Serialize commands back to an absolute ``d`` string (S/T written as C/Q)."""
    parts: list[str] = []
    for cmd in commands:
        x, y = _fmt(cmd.end.x), _fmt(cmd.end.y)
        kind = cmd.kind
        if kind is CommandKind.MOVE_TO:
            parts.append(f"M{x} {y}")
        elif kind in (CommandKind.LINE_TO, CommandKind.HORIZONTAL_TO, CommandKind.VERTICAL_TO):
            parts.append(f"L{x} {y}")
        elif kind in _CUBIC_FAMILY:
            c1, c2 = cmd.control1, cmd.control2
            parts.append(f"C{_fmt(c1.x)} {_fmt(c1.y)} {_fmt(c2.x)} {_fmt(c2.y)} {x} {y}")
        elif kind in _QUADRATIC_FAMILY:
            c1 = cmd.control1
            parts.append(f"Q{_fmt(c1.x)} {_fmt(c1.y)} {x} {y}")
        elif kind is CommandKind.ARC_TO:
            rx, ry = cmd.radius
            parts.append(
                f"A{_fmt(rx)} {_fmt(ry)} {_fmt(cmd.rotation)} {int(cmd.large_arc)} {int(cmd.sweep)} {x} {y}"
            )
        else:
            parts.append("Z")
    return " ".join(parts)
