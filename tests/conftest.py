import pytest

# q0 moves off the leading blank into q1, which accepts.
EXAMPLE_DESCRIPTION = """\
(
{q0,q1},
{a,b},
{a,b,B},
{
(q0,B)->(q1,B,D),
(q0,a)->(q1,b,D),
},
q0,
{q1}
)
"""

# Replaces every a with b and accepts on the trailing blank.
REWRITE_DESCRIPTION = """\
(
{q0,q1,q2},
{a,b},
{a,b,B},
{
(q0,B)->(q1,B,D),
(q1,a)->(q1,b,D),
(q1,b)->(q1,b,D),
(q1,B)->(q2,B,E),
},
q0,
{q2}
)
"""


@pytest.fixture
def example_lines():
    return EXAMPLE_DESCRIPTION.splitlines()


@pytest.fixture
def rewrite_lines():
    return REWRITE_DESCRIPTION.splitlines()


@pytest.fixture
def description_file(tmp_path):
    def write(text=EXAMPLE_DESCRIPTION, name="machine.txt"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return write
