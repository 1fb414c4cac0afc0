import io
import logging

import pytest

from tm_interpreter import (
    ACCEPT_TOKEN,
    REJECT_TOKEN,
    MachineSpecification,
    RuntimeFault,
    Tape,
    Transition,
    TuringMachine,
    format_configuration,
    parse_description,
)


def make_spec(transitions, initial="q0", accept=("q1",)):
    return MachineSpecification(
        states=["q0", "q1", "q2"],
        input_alphabet=["a", "b"],
        tape_alphabet=["a", "b", "B"],
        transitions=[Transition(*fields) for fields in transitions],
        initial_state=initial,
        accept_states=frozenset(accept),
    )


def test_tape_from_word():
    assert Tape.from_word("ab").cells == ["B", "a", "b", "B"]
    assert Tape.from_word("").cells == ["B", "B"]


def test_tape_read_out_of_range():
    tape = Tape.from_word("a")
    with pytest.raises(RuntimeFault):
        tape.read(3)
    with pytest.raises(RuntimeFault):
        tape.read(-1)


def test_format_configuration_marks_head():
    assert format_configuration(list("BaB"), 0, "q0") == "{q0}BaB"
    assert format_configuration(list("BaB"), 1, "q1") == "B{q1}aB"


def test_format_configuration_head_past_end():
    assert format_configuration(list("BaB"), 3, "q2") == "BaB{q2}"


def test_end_to_end_example(example_lines):
    output = io.StringIO()
    result = TuringMachine(parse_description(example_lines)).run("a", output)
    assert output.getvalue() == "{q0}BaB\nB{q1}aB\n" + ACCEPT_TOKEN + "\n"
    assert result.accepted
    assert result.halted
    assert result.steps == 1
    assert result.verdict == ACCEPT_TOKEN
    assert result.lines() == ["{q0}BaB", "B{q1}aB", ACCEPT_TOKEN]


def test_default_tokens():
    assert (ACCEPT_TOKEN, REJECT_TOKEN) == ("aceita", "rejeita")


def test_rewrite_machine(rewrite_lines):
    result = TuringMachine(parse_description(rewrite_lines)).run("ab")
    assert result.configurations == [
        "{q0}BabB",
        "B{q1}abB",
        "Bb{q1}bB",
        "Bbb{q1}B",
        "Bb{q2}bB",
    ]
    assert result.verdict == ACCEPT_TOKEN


@pytest.mark.parametrize("word", ["", "a", "abba", "bbb"])
def test_configuration_count_is_steps_plus_one(rewrite_lines, word):
    result = TuringMachine(parse_description(rewrite_lines)).run(word)
    assert result.halted
    assert len(result.configurations) == result.steps + 1
    assert result.lines()[-1] == ACCEPT_TOKEN
    assert result.lines().count(ACCEPT_TOKEN) + result.lines().count(REJECT_TOKEN) == 1


def test_runs_are_deterministic(rewrite_lines):
    machine = TuringMachine(parse_description(rewrite_lines))
    first, second = io.StringIO(), io.StringIO()
    machine.run("abab", first)
    machine.run("abab", second)
    assert first.getvalue() == second.getvalue()


@pytest.mark.parametrize("word", ["c", "a", ""])
def test_rejects_immediately_without_blank_transition(word):
    spec = make_spec([("q0", "a", "q1", "b", "D")])
    output = io.StringIO()
    result = TuringMachine(spec).run(word, output)
    assert output.getvalue() == format_configuration(Tape.from_word(word).cells, 0, "q0") + "\n" + REJECT_TOKEN + "\n"
    assert not result.accepted
    assert result.halted
    assert result.steps == 0
    assert result.verdict == REJECT_TOKEN


def test_initial_accept_state_needs_a_step():
    spec = make_spec([("q0", "B", "q0", "B", "D")], accept=("q0",))
    result = TuringMachine(spec).run("a")
    assert result.accepted
    assert result.steps == 1
    assert result.configurations == ["{q0}BaB", "B{q0}aB"]


def test_initial_accept_state_rejects_without_transition():
    spec = make_spec([], accept=("q0",))
    result = TuringMachine(spec).run("a")
    assert not result.accepted
    assert result.verdict == REJECT_TOKEN
    assert result.configurations == ["{q0}BaB"]


def test_first_matching_transition_wins():
    spec = make_spec([("q0", "B", "q1", "a", "D"), ("q0", "B", "q2", "b", "D")])
    result = TuringMachine(spec).run("")
    assert result.configurations[-1] == "a{q1}B"


def test_left_move_from_start_faults_and_keeps_partial_output():
    spec = make_spec([("q0", "B", "q1", "B", "E")])
    output = io.StringIO()
    with pytest.raises(RuntimeFault) as excinfo:
        TuringMachine(spec).run("a", output)
    assert excinfo.value.head == -1
    assert excinfo.value.step == 0
    assert output.getvalue() == "{q0}BaB\n"


def test_right_overrun_renders_trailing_head_then_faults():
    spec = make_spec(
        [("q0", "B", "q2", "B", "D"), ("q2", "B", "q2", "B", "D")],
        accept=(),
    )
    output = io.StringIO()
    with pytest.raises(RuntimeFault) as excinfo:
        TuringMachine(spec).run("", output)
    assert output.getvalue().splitlines() == ["{q0}BB", "B{q2}B", "BB{q2}"]
    assert excinfo.value.head == 2


def test_invalid_direction_faults_at_runtime():
    spec = make_spec([("q0", "B", "q1", "B", "X")])
    with pytest.raises(RuntimeFault, match="invalid move direction"):
        TuringMachine(spec).run("a")


def test_extend_policy_grows_left():
    spec = make_spec([("q0", "B", "q2", "a", "E"), ("q2", "B", "q1", "b", "D")])
    result = TuringMachine(spec, tape_policy="extend").run("")
    assert result.configurations == ["{q0}BB", "{q2}BaB", "b{q1}aB"]
    assert result.accepted


def test_extend_policy_grows_right():
    spec = make_spec(
        [("q0", "B", "q2", "a", "D"), ("q2", "B", "q3", "b", "D"), ("q3", "B", "q1", "a", "D")],
    )
    result = TuringMachine(spec, tape_policy="extend").run("")
    assert result.configurations == ["{q0}BB", "a{q2}B", "ab{q3}", "aba{q1}"]
    assert result.accepted


def test_unknown_tape_policy():
    with pytest.raises(ValueError):
        TuringMachine(make_spec([]), tape_policy="infinite")


def test_step_limit_stops_without_verdict():
    spec = make_spec([("q0", "B", "q2", "B", "D"), ("q2", "a", "q0", "a", "E")], accept=())
    output = io.StringIO()
    result = TuringMachine(spec).run("a", output, max_steps=5)
    assert not result.halted
    assert result.verdict is None
    assert result.steps == 5
    assert len(output.getvalue().splitlines()) == 6


def test_custom_tokens(example_lines):
    machine = TuringMachine(parse_description(example_lines), accept_token="accept", reject_token="reject")
    assert machine.run("a").verdict == "accept"


def test_capture_disabled(example_lines):
    output = io.StringIO()
    result = TuringMachine(parse_description(example_lines)).run("a", output, capture=False)
    assert result.configurations == []
    assert result.lines() == [ACCEPT_TOKEN]
    assert len(output.getvalue().splitlines()) == 3


def test_logs_verdict(example_lines, caplog):
    with caplog.at_level(logging.INFO, logger="tm_interpreter"):
        TuringMachine(parse_description(example_lines)).run("a")
    assert ACCEPT_TOKEN in caplog.text
