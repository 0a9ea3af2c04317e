import pytest

from cork.cork_runtime import (
    CommandRunner, Session, ExecutionResult, ConfigKey,
    apply_directive, resolve_output_radix,
)
from cork.cork_config import Config
from cork.cork_datatypes import (
    Mode, OutputRadix, Number, Evaluate, Convert, NoOp,
    ParseError, DivideByZeroError, LiteralRangeError,
    InvalidDirectiveKey, InvalidDirectiveValue, DirectiveNotAllowed,
)


@pytest.fixture
def runner():
    """A runner with a fresh hex-mode session."""
    return CommandRunner(Session(mode=Mode.HEX))


def outputs(runner, lines):
    return [runner.handle_line(line).output for line in lines]


# --- Evaluation and the answer register ---

def test_ans_threads_through_lines(runner):
    assert outputs(runner, ["5", "ans + 5", "ans to bin"]) == ["0d5", "0xa", "0b1010"]
    assert runner.session.ans == 10


def test_failed_line_keeps_previous_answer(runner):
    runner.handle_line("2a")
    result = runner.handle_line("ans / 0")
    assert result.status == 'error'
    assert isinstance(result.error, DivideByZeroError)
    assert runner.session.ans == 0x2a
    assert runner.handle_line("ans").output == "0x2a"


def test_parse_failure_keeps_previous_answer(runner):
    runner.handle_line("7")
    result = runner.handle_line("7 +")
    assert isinstance(result.error, ParseError)
    assert runner.session.ans == 7


def test_literal_error_is_reported(runner):
    result = runner.handle_line("0b102")
    assert result.status == 'error'
    assert isinstance(result.error, LiteralRangeError)
    assert result.error_message.startswith("LiteralRangeError: ")


def test_implicit_conversion_direction_follows_mode():
    hex_runner = CommandRunner(Session(mode=Mode.HEX))
    dec_runner = CommandRunner(Session(mode=Mode.DEC))
    assert hex_runner.handle_line("127").output == "0d295"
    assert dec_runner.handle_line("127").output == "0x7f"


def test_convert_updates_ans(runner):
    result = runner.handle_line("ff to dec")
    assert result.output == "0d255"
    assert result.radix is OutputRadix.DECIMAL
    assert runner.session.ans == 255


def test_punctuated_session():
    runner = CommandRunner(Session(mode=Mode.DEC, punctuate=True))
    assert runner.handle_line("3735928559 to hex").output == "0xdead_beef"


def test_blank_line_is_noop(runner):
    runner.handle_line("3")
    result = runner.handle_line("   ")
    assert result.status == 'success'
    assert result.command is NoOp
    assert result.output == ""
    assert runner.session.ans == 3


# --- Directives ---

def test_set_output_format(runner):
    result = runner.handle_line("set of oct")
    assert result.status == 'success'
    assert result.output is None
    assert runner.session.output_radix is OutputRadix.OCTAL
    assert runner.handle_line("(7 + 1)").output == "0o10"


def test_set_mode_changes_how_later_lines_parse(runner):
    runner.handle_line("set mode dec")
    assert runner.session.mode is Mode.DEC
    assert runner.handle_line("10 + 0").output == "0xa"
    result = runner.handle_line("ff")
    assert isinstance(result.error, ParseError)


@pytest.mark.parametrize("line, error", [
    ("set foo hex", InvalidDirectiveKey),
    ("set OF hex", InvalidDirectiveKey),
    ("set of", InvalidDirectiveValue),
    ("set of decimal", InvalidDirectiveValue),
    ("set mode oct", InvalidDirectiveValue),
    ("set mode hex dec", InvalidDirectiveValue),
])
def test_invalid_directives_leave_session_unchanged(runner, line, error):
    before = Session(**vars(runner.session))
    result = runner.handle_line(line)
    assert result.status == 'error'
    assert isinstance(result.error, error)
    assert runner.session == before


def test_directive_messages():
    assert str(InvalidDirectiveKey("foo")) == "Invalid key: foo"
    assert str(InvalidDirectiveValue("of", "decimal")) == "Invalid value decimal for key of"
    assert str(InvalidDirectiveValue("of", None)) == "Missing value for key of"


def test_apply_directive_directly():
    session = Session()
    apply_directive(session, [ConfigKey.OUTPUT_FORMAT.value, "bin"])
    apply_directive(session, [ConfigKey.MODE.value, "dec"])
    assert session.output_radix is OutputRadix.BINARY
    assert session.mode is Mode.DEC


def test_directives_can_be_disabled():
    runner = CommandRunner(Session(), allow_directives=False)
    result = runner.handle_line("set of bin")
    assert isinstance(result.error, DirectiveNotAllowed)
    assert runner.session.output_radix is OutputRadix.HEX


# --- Results and sessions ---

def test_resolve_output_radix():
    assert resolve_output_radix(Evaluate(Number(1)), OutputRadix.OCTAL) is OutputRadix.OCTAL
    assert resolve_output_radix(Convert(Number(1), OutputRadix.BINARY), OutputRadix.OCTAL) is OutputRadix.BINARY


def test_format_error_points_at_column(runner):
    result = runner.handle_line("5 to nonex")
    lines = result.format_error().splitlines()
    assert lines[0].startswith("ParseError: ")
    assert "col 6" in lines[0]
    assert lines[1] == "  5 to nonex"
    assert lines[2] == "       ^"


def test_format_error_on_success_is_empty():
    assert ExecutionResult('success').format_error() == ""


def test_sessions_are_independent():
    first = CommandRunner(Session(mode=Mode.DEC))
    second = CommandRunner(Session(mode=Mode.DEC))
    first.handle_line("99")
    first.handle_line("set of bin")
    assert second.session.ans == 0
    assert second.handle_line("ans + 1").output == "0x1"


def test_session_from_config():
    config = Config(output_radix=OutputRadix.BINARY, punctuate_output=True, mode=Mode.DEC)
    session = Session.from_config(config)
    assert session == Session(mode=Mode.DEC, ans=0, output_radix=OutputRadix.BINARY, punctuate=True)


def test_debug_output_is_env_gated(runner, monkeypatch, capsys):
    monkeypatch.delenv("CORK_DEBUG", raising=False)
    runner.handle_line("set of bin")
    assert capsys.readouterr().err == ""

    monkeypatch.setenv("CORK_DEBUG", "1")
    runner.handle_line("set of hex")
    runner.handle_line("1 /")
    err = capsys.readouterr().err
    assert "[DBG] set of hex -> mode=hex of=hex" in err
    assert "[DBG] ParseError for '1 /'" in err
