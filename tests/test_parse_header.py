import json
import subprocess
import sys
from pathlib import Path

import pytest

from define_parser import Constant, Deferred, Define, parse_header
from header_errors import (
    HeaderParseError,
    MalformedPreamble,
    UnexpectedContent,
    UnrecognizedValueGrammar,
    UnterminatedComment,
)

SAMPLE = Path(__file__).parent / "data" / "input-event-codes.h"


def _header(body: str) -> str:
    return "/* license */\n#ifndef GUARD_H\n#define GUARD_H\n" + body + "#endif\n"


def test_sample_header():
    defines = parse_header(SAMPLE.read_text(encoding="utf-8"))
    names = [d.name for d in defines]

    assert "_UAPI_INPUT_EVENT_CODES_H" not in names
    assert names[0] == "INPUT_PROP_POINTER"
    assert names[-1] == "SND_BELL"
    assert len(defines) == 45

    by_name = {d.name: d for d in defines}
    assert by_name["EV_MAX"].expression == Constant(0x1F)
    assert by_name["KEY_CNT"].expression == Deferred("KEY_MAX", 1)
    assert by_name["INPUT_PROP_CNT"].expression == Deferred("INPUT_PROP_MAX", 1)
    assert by_name["KEY_MIN_INTERESTING"].expression == Deferred("KEY_MUTE")
    assert by_name["ABS_MT_SLOT"].comment == "MT slot being modified"
    assert by_name["SW_RFKILL_ALL"].comment == 'rfkill master switch, type "any" set = radio enabled'
    assert by_name["SW_RADIO"] == Define("SW_RADIO", Deferred("SW_RFKILL_ALL"), "deprecated")


def test_line_numbers_follow_physical_lines():
    text = _header("#define A_1 1 /* one\n   more */\n\n#define A_2 2\n")
    first, second = parse_header(text)
    assert first.lineno == 4
    assert first.comment == "one more"
    assert second.lineno == 7


def test_comment_on_next_line_is_not_attached():
    defines = parse_header(_header("#define SW_MICROPHONE_INSERT\t0x04\n/* set = inserted */\n"))
    assert defines == [Define("SW_MICROPHONE_INSERT", Constant(4), None)]


def test_blank_lines_and_comments_between_defines():
    body = "#define EV_MAX\t0x1f\n\n\n/* a comment */\n/*\n * block\n */\n#define EV_MAX\t0x1f\n"
    assert parse_header(_header(body)) == [
        Define("EV_MAX", Constant(31)),
        Define("EV_MAX", Constant(31)),
    ]


def test_empty_body():
    assert parse_header(_header("")) == []


def test_valueless_define_in_body_is_discarded(capsys):
    defines = parse_header(_header("#define A_1 1\n#define FLAG\n#define A_2 2\n"))
    assert [d.name for d in defines] == ["A_1", "A_2"]
    assert "FLAG" in capsys.readouterr().err


def test_trailing_comments_after_endif_are_allowed():
    assert parse_header(_header("#define A_1 1\n") + "\n/* end */\n") == [Define("A_1", Constant(1))]


def test_missing_preamble():
    with pytest.raises(MalformedPreamble) as excinfo:
        parse_header("#define SYN_REPORT 0\n#endif\n")
    assert excinfo.value.lineno == 1


def test_empty_input():
    with pytest.raises(MalformedPreamble):
        parse_header("")


def test_guard_define_must_match():
    with pytest.raises(MalformedPreamble) as excinfo:
        parse_header("#ifndef GUARD_H\n#define OTHER_H\n#endif\n")
    assert excinfo.value.lineno == 2


def test_guard_define_must_have_no_value():
    with pytest.raises(MalformedPreamble):
        parse_header("#ifndef GUARD_H\n#define GUARD_H 1\n#endif\n")


def test_guard_define_missing():
    with pytest.raises(MalformedPreamble):
        parse_header("/* x */\n#ifndef GUARD_H\n")


def test_unterminated_comment():
    with pytest.raises(UnterminatedComment):
        parse_header(_header("#define A_1 1 /* this never ends\n"))


def test_unterminated_comment_before_next_define():
    with pytest.raises(UnterminatedComment):
        parse_header(_header("#define A_1 1 /* open\n#define A_2 2\n/* */\n"))


def test_hex_overflow_fails_whole_header():
    with pytest.raises(UnrecognizedValueGrammar) as excinfo:
        parse_header(_header("#define A_1 0x123456789\n"))
    assert excinfo.value.lineno == 4


def test_garbage_after_value():
    with pytest.raises(UnrecognizedValueGrammar):
        parse_header(_header("#define A_1 1 2\n"))


def test_unknown_directive():
    with pytest.raises(UnexpectedContent):
        parse_header(_header("#include <linux/types.h>\n"))


def test_missing_endif():
    with pytest.raises(UnexpectedContent) as excinfo:
        parse_header("#ifndef GUARD_H\n#define GUARD_H\n#define A_1 1\n")
    assert "#endif" in excinfo.value.reason


def test_content_after_endif():
    with pytest.raises(UnexpectedContent):
        parse_header(_header("") + "#define LATE_1 1\n")


def test_errors_share_a_base():
    with pytest.raises(HeaderParseError):
        parse_header("nonsense")


def test_define_parser_script_prints_json():
    script = Path(__file__).parent.parent / "define_parser.py"
    result = subprocess.run([sys.executable, str(script), str(SAMPLE)], capture_output=True, text=True)

    assert result.returncode == 0, result.stderr
    data = json.loads(result.stdout)
    assert data[0] == {"name": "INPUT_PROP_POINTER", "expression": {"constant": 0}, "comment": "needs a pointer"}
    assert {"name": "KEY_CNT", "expression": {"other": "KEY_MAX", "add": 1}, "comment": None} in data


def test_define_after_closed_comment_on_same_line():
    defines = parse_header("#ifndef G\n#define G\n/* leading */ #define KEY_A 1\n#endif\n")
    assert defines == [Define("KEY_A", Constant(1))]
    assert defines[0].lineno == 3


def test_define_after_folded_block_comment():
    text = "#ifndef G\n#define G\n/* block\n   ends */ #define KEY_A 1 /* one */\n#define KEY_B 2\n#endif\n"
    first, second = parse_header(text)
    assert first == Define("KEY_A", Constant(1), "one")
    assert first.lineno == 4
    assert second.lineno == 5


def test_error_offset_after_leading_comment():
    with pytest.raises(UnrecognizedValueGrammar) as excinfo:
        parse_header("#ifndef G\n#define G\n/* c */ #define KEY_A ???\n#endif\n")
    # "#ifndef G\n#define G\n" is 20 characters, "/* c */ #define KEY_A " another 22
    assert excinfo.value.offset == 42
    assert excinfo.value.lineno == 3


def test_define_parser_script_reports_parse_errors(tmp_path):
    header = tmp_path / "broken.h"
    header.write_text("#define SYN_REPORT 0\n")
    script = Path(__file__).parent.parent / "define_parser.py"
    result = subprocess.run([sys.executable, str(script), str(header)], capture_output=True, text=True)

    assert result.returncode == 1
    assert "Error:" in result.stderr
    assert "line 1 (offset 0)" in result.stderr
    assert "Traceback" not in result.stderr
    assert result.stdout == ""
