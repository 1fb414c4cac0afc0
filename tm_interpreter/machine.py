from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TextIO

from .config_loader import BLANK, MOVES, MachineSpecification, Transition
from .errors import RuntimeFault

logger = logging.getLogger(__name__)

ACCEPT_TOKEN = "aceita"
REJECT_TOKEN = "rejeita"

FIXED = "fixed"
EXTEND = "extend"
TAPE_POLICIES = (FIXED, EXTEND)


def format_configuration(cells: Sequence[str], head_position: int, state: str) -> str:
    """Render one configuration, marking the head with ``{state}``.

    A head sitting one past the last cell is drawn after that cell.
    """

    last = len(cells) - 1
    rendered = []
    for index, symbol in enumerate(cells):
        if index == head_position:
            rendered.append(f"{{{state}}}{symbol}")
        elif head_position == len(cells) and index == last:
            rendered.append(f"{symbol}{{{state}}}")
        else:
            rendered.append(symbol)
    return "".join(rendered)


class Tape:
    """Finite tape delimited by a blank on each side of the input word."""

    def __init__(self, cells: Sequence[str], blank_symbol: str = BLANK) -> None:
        self.blank_symbol = blank_symbol
        self.cells: List[str] = list(cells)

    @classmethod
    def from_word(cls, word: str, blank_symbol: str = BLANK) -> "Tape":
        return cls([blank_symbol, *word, blank_symbol], blank_symbol)

    def __len__(self) -> int:
        return len(self.cells)

    def _check(self, position: int) -> None:
        if not 0 <= position < len(self.cells):
            raise RuntimeFault(
                f"head position {position} is outside the tape [0, {len(self.cells)})",
                head=position,
            )

    def read(self, position: int) -> str:
        self._check(position)
        return self.cells[position]

    def write(self, position: int, symbol: str) -> None:
        self._check(position)
        self.cells[position] = symbol

    def extend_left(self) -> None:
        self.cells.insert(0, self.blank_symbol)

    def extend_right(self) -> None:
        self.cells.append(self.blank_symbol)

    def view(self, head_position: int, state: str) -> str:
        return format_configuration(self.cells, head_position, state)


@dataclass
class MachineResult:
    """Outcome of a single run."""

    accepted: bool
    halted: bool
    verdict: Optional[str]
    reason: str
    steps: int
    configurations: List[str] = field(default_factory=list)

    def lines(self) -> List[str]:
        if self.verdict is None:
            return list(self.configurations)
        return [*self.configurations, self.verdict]


class TuringMachine:
    """Interpreter for deterministic single-tape Turing machines."""

    def __init__(
        self,
        specification: MachineSpecification,
        *,
        tape_policy: str = FIXED,
        accept_token: str = ACCEPT_TOKEN,
        reject_token: str = REJECT_TOKEN,
    ) -> None:
        if tape_policy not in TAPE_POLICIES:
            raise ValueError(f"unknown tape policy {tape_policy!r}, expected one of {TAPE_POLICIES}")
        self.spec = specification
        self.tape_policy = tape_policy
        self.accept_token = accept_token
        self.reject_token = reject_token
        self.transition_map = specification.transition_map()

    def _next_transition(self, state: str, symbol: str) -> Optional[Transition]:
        return self.transition_map.get((state, symbol))

    def run(
        self,
        input_word: str,
        output: Optional[TextIO] = None,
        *,
        max_steps: Optional[int] = None,
        capture: bool = True,
    ) -> MachineResult:
        """Run the machine on ``input_word``.

        Every configuration, and finally the verdict, is written to
        ``output`` as soon as it is produced. Without ``max_steps`` the run
        only stops when the machine accepts, rejects or faults.
        """

        tape = Tape.from_word(input_word, self.spec.blank_symbol)
        state = self.spec.initial_state
        head_position = 0
        steps = 0
        configurations: List[str] = []

        def emit(line: str) -> None:
            if output is not None:
                output.write(line + "\n")

        def snapshot() -> None:
            line = tape.view(head_position, state)
            logger.debug("step %d: %s", steps, line)
            if capture:
                configurations.append(line)
            emit(line)

        def finish(accepted: bool, verdict: str, reason: str) -> MachineResult:
            emit(verdict)
            logger.info("Input %r: %s after %d step(s)", input_word, verdict, steps)
            return MachineResult(
                accepted=accepted,
                halted=True,
                verdict=verdict,
                reason=reason,
                steps=steps,
                configurations=configurations,
            )

        snapshot()

        while max_steps is None or steps < max_steps:
            if self.tape_policy == EXTEND and head_position == len(tape):
                tape.extend_right()
            try:
                current_symbol = tape.read(head_position)
            except RuntimeFault as exc:
                raise RuntimeFault(str(exc), head=head_position, state=state, step=steps) from None

            transition = self._next_transition(state, current_symbol)
            if transition is None:
                return finish(False, self.reject_token, "no transition defined")

            tape.write(head_position, transition.write_symbol)
            state = transition.to_state

            offset = MOVES.get(transition.move_direction)
            if offset is None:
                raise RuntimeFault(
                    f"invalid move direction {transition.move_direction!r}",
                    head=head_position,
                    state=state,
                    step=steps,
                )
            head_position += offset
            if head_position < 0:
                if self.tape_policy != EXTEND:
                    raise RuntimeFault(
                        "head moved left past the start of the tape",
                        head=head_position,
                        state=state,
                        step=steps,
                    )
                tape.extend_left()
                head_position = 0

            steps += 1
            snapshot()

            if state in self.spec.accept_states:
                return finish(True, self.accept_token, "accept state reached")

        logger.warning("Input %r: step limit of %d reached", input_word, max_steps)
        return MachineResult(
            accepted=False,
            halted=False,
            verdict=None,
            reason="step limit reached",
            steps=steps,
            configurations=configurations,
        )
