from __future__ import annotations

import logging
import string
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

import yaml

from .errors import ParseError, ResourceError

logger = logging.getLogger(__name__)

BLANK = "B"
STATE_PREFIX = "q"
ARROW = "->"
YAML_SUFFIXES = {".yaml", ".yml"}

# D/E are "direita"/"esquerda"; R/L are accepted as aliases.
MOVES: Dict[str, int] = {"D": 1, "R": 1, "E": -1, "L": -1}


@dataclass(frozen=True)
class Transition:
    """One rule of the machine: (state, read) -> (state, write, move)."""

    from_state: str
    read_symbol: str
    to_state: str
    write_symbol: str
    move_direction: str


@dataclass(frozen=True)
class MachineSpecification:
    """Immutable description of a deterministic single-tape machine."""

    states: Tuple[str, ...]
    input_alphabet: Tuple[str, ...]
    tape_alphabet: Tuple[str, ...]
    transitions: Tuple[Transition, ...]
    initial_state: str
    accept_states: FrozenSet[str] = field(default_factory=frozenset)
    blank_symbol: str = BLANK

    def __post_init__(self) -> None:
        # Stored as tuples so the specification stays hashable.
        for name in ("states", "input_alphabet", "tape_alphabet", "transitions"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        object.__setattr__(self, "accept_states", frozenset(self.accept_states))

    def transition_map(self) -> Dict[Tuple[str, str], Transition]:
        """Index transitions by (state, symbol), keeping the first declaration."""

        mapping: Dict[Tuple[str, str], Transition] = {}
        for transition in self.transitions:
            mapping.setdefault((transition.from_state, transition.read_symbol), transition)
        return mapping


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` only, dropping one trailing ``\\r`` per line."""

    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_list(line: str) -> List[str]:
    """Split a ``{a,b,c}``-style line into its tokens."""

    return [token for token in line.strip(string.punctuation).split(",") if token]


def _first_char(token: str, field_name: str, line_number: Optional[int], line: str) -> str:
    if not token:
        raise ParseError(
            f"empty token for {field_name}", line_number=line_number, line=line, field=field_name
        )
    return token[0]


def parse_transition(line: str, line_number: Optional[int] = None) -> Transition:
    """Parse ``(q0,a)->(q1,b,D)`` into a :class:`Transition`."""

    parts = line.split(ARROW)
    if len(parts) != 2:
        raise ParseError(
            f"expected exactly one '{ARROW}' in transition",
            line_number=line_number,
            line=line,
            field="transition",
        )

    source = parse_list(parts[0])
    target = parse_list(parts[1])
    if len(source) != 2:
        raise ParseError(
            f"expected (state,symbol) before '{ARROW}', got {len(source)} token(s)",
            line_number=line_number,
            line=line,
            field="transition",
        )
    if len(target) != 3:
        raise ParseError(
            f"expected (state,symbol,direction) after '{ARROW}', got {len(target)} token(s)",
            line_number=line_number,
            line=line,
            field="transition",
        )

    move = _first_char(target[2], "move_direction", line_number, line)
    if move not in MOVES:
        raise ParseError(
            f"invalid move direction {move!r}, expected one of {sorted(MOVES)}",
            line_number=line_number,
            line=line,
            field="move_direction",
        )

    return Transition(
        from_state=source[0],
        read_symbol=_first_char(source[1], "read_symbol", line_number, line),
        to_state=target[0],
        write_symbol=_first_char(target[1], "write_symbol", line_number, line),
        move_direction=move,
    )


def parse_description(lines: Iterable[str]) -> MachineSpecification:
    """Build a specification from the positional text grammar.

    Line 1 is a header, lines 2-4 hold the states and both alphabets. Later
    lines are recognised by their first character: ``(`` for transitions,
    ``{`` for the accept states. Any line starting with the state prefix
    declares the initial state, the last one winning.
    """

    states: List[str] = []
    input_alphabet: List[str] = []
    tape_alphabet: List[str] = []
    transitions: List[Transition] = []
    initial_state = ""
    accept_states: List[str] = []

    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()

        if line_number == 2:
            states = parse_list(line)
        elif line_number == 3:
            input_alphabet = parse_list(line)
        elif line_number == 4:
            tape_alphabet = parse_list(line)
        elif line_number > 4 and line.startswith("("):
            transitions.append(parse_transition(line, line_number))

        if line.startswith(STATE_PREFIX):
            initial_state = line.strip(",")
        elif line.startswith("{") and line_number > 4:
            accept_states = parse_list(line)

    spec = MachineSpecification(
        states=states,
        input_alphabet=input_alphabet,
        tape_alphabet=tape_alphabet,
        transitions=transitions,
        initial_state=initial_state,
        accept_states=frozenset(accept_states),
    )
    logger.debug(
        "Parsed machine: %d states, %d transitions, initial=%r, accept=%s",
        len(states),
        len(transitions),
        initial_state,
        sorted(spec.accept_states),
    )
    return spec


def _normalize_config(data: Dict) -> Dict:
    """Accept documents with or without a top-level 'machine' node."""

    if "machine" in data and isinstance(data["machine"], dict):
        return data["machine"]
    return data


def _symbol(value, field_name: str, index: Optional[int] = None) -> str:
    if value is None:
        raise ParseError(f"missing '{field_name}'", line_number=index, field=field_name)
    value = str(value)
    if len(value) != 1:
        raise ParseError(
            f"'{field_name}' must be a single character, got {value!r}",
            line_number=index,
            field=field_name,
        )
    return value


def _state_name(value) -> Optional[str]:
    return None if value is None else str(value)


def parse_yaml_description(text: str) -> MachineSpecification:
    """Build a specification from the YAML description format."""

    try:
        raw_data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ParseError(f"invalid YAML: {exc}", field="document") from exc

    if not isinstance(raw_data, dict):
        raise ParseError("the YAML document must be a mapping", field="document")

    config = _normalize_config(raw_data)

    def require(key: str) -> Dict:
        if key not in config or not isinstance(config[key], dict):
            raise ParseError(f"block '{key}' is required and must be a mapping", field=key)
        return config[key]

    q_states = require("q_states")
    q_list = [str(state) for state in q_states.get("q_list") or []]
    if not q_list:
        raise ParseError("'q_list' must contain at least one state", field="q_list")
    initial_state = _state_name(q_states.get("initial"))
    if initial_state not in q_list:
        raise ParseError("the initial state must belong to 'q_list'", field="initial")
    final_states = q_states.get("final")
    if final_states is None:
        final_states = []
    elif not isinstance(final_states, list):
        final_states = [final_states]
    final_states = [_state_name(state) for state in final_states]
    for final_state in final_states:
        if final_state not in q_list:
            raise ParseError(f"final state {final_state!r} is not in 'q_list'", field="final")

    alphabet_block = require("alphabet")
    input_alphabet = [str(symbol) for symbol in alphabet_block.get("input") or []]
    tape_alphabet = [str(symbol) for symbol in alphabet_block.get("tape") or []]
    blank_symbol = config.get("blank")
    if blank_symbol is None:
        blank_symbol = alphabet_block.get("blank")
    blank_symbol = _symbol(BLANK if blank_symbol is None else blank_symbol, "blank")

    transition_block = config.get("delta")
    if not isinstance(transition_block, list):
        raise ParseError("block 'delta' must be a list of transitions", field="delta")

    transitions = []
    for index, raw_transition in enumerate(transition_block, start=1):
        params = raw_transition.get("params") if isinstance(raw_transition, dict) else None
        output = raw_transition.get("output") if isinstance(raw_transition, dict) else None
        if not isinstance(params, dict) or not isinstance(output, dict):
            raise ParseError(
                "each transition needs 'params' and 'output' nodes",
                line_number=index,
                field="delta",
            )

        from_state = _state_name(params.get("initial_state"))
        to_state = _state_name(output.get("final_state"))
        for name, value in (("initial_state", from_state), ("final_state", to_state)):
            if value not in q_list:
                raise ParseError(
                    f"unknown state {value!r} in '{name}'", line_number=index, field=name
                )

        movement = _symbol(output.get("tape_displacement"), "tape_displacement", index)
        if movement not in MOVES:
            raise ParseError(
                f"invalid movement {movement!r}, expected one of {sorted(MOVES)}",
                line_number=index,
                field="tape_displacement",
            )

        transitions.append(
            Transition(
                from_state=from_state,
                read_symbol=_symbol(params.get("tape_input"), "tape_input", index),
                to_state=to_state,
                write_symbol=_symbol(output.get("tape_output"), "tape_output", index),
                move_direction=movement,
            )
        )

    logger.debug("Parsed YAML machine: %d states, %d transitions", len(q_list), len(transitions))
    return MachineSpecification(
        states=q_list,
        input_alphabet=input_alphabet,
        tape_alphabet=tape_alphabet,
        transitions=transitions,
        initial_state=initial_state,
        accept_states=frozenset(final_states),
        blank_symbol=blank_symbol,
    )


def load_specification(path: str | Path) -> MachineSpecification:
    """Read a description file and parse it according to its suffix."""

    path = Path(path)
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ResourceError(f"unable to read description {str(path)!r}: {exc}", path=path) from exc

    logger.info("Loading machine description from %s", path)
    if path.suffix.lower() in YAML_SUFFIXES:
        return parse_yaml_description(text)
    return parse_description(split_lines(text))
