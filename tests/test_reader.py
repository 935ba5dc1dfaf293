from pathlib import Path

import pytest

from dolint.core.errors import InputError, ParseError
from dolint.core.models import Region
from dolint.core.utils import iter_lines
from dolint.parsers.stata import StataParser, classify_lines


def classify(text):
    return list(classify_lines(iter_lines(text)))


def test_line_comment_and_code_regions():
    [line] = classify('gen x = 1 // note')
    assert line.region is Region.CODE
    assert line.mask == "c" * 10 + "l" * 7
    assert line.code.rstrip() == "gen x = 1"


def test_content_keeps_strings_and_drops_comments():
    [line] = classify('keep if s=="a" /* why */')
    assert line.code.rstrip() == "keep if s=="
    assert line.content.rstrip() == 'keep if s=="a"'


def test_comment_only_lines():
    lines = classify("// a note\n* star note\n/* block */")
    assert [line.region for line in lines] == [
        Region.LINE_COMMENT,
        Region.LINE_COMMENT,
        Region.BLOCK_COMMENT,
    ]


def test_markers_inside_strings_are_not_comments():
    [line] = classify('display "http://example.org /* not a comment"')
    assert "l" not in line.mask and "b" not in line.mask
    assert line.region is Region.CODE
    assert line.region_at(10) is Region.STRING


def test_block_comment_spans_lines_and_nests():
    lines = classify('/* outer\n/* inner */ still\n*/ display "x"')
    assert lines[0].region is Region.BLOCK_COMMENT
    assert lines[1].region is Region.BLOCK_COMMENT
    assert set(lines[1].mask) == {"b"}
    assert lines[2].region is Region.CODE
    assert lines[2].mask.startswith("bb")


def test_compound_quotes():
    [line] = classify("display `\"say \"hi\"\"' + 1")
    start = line.text.index("`")
    end = line.text.index("'") + 1
    assert line.mask[start:end] == "s" * (end - start)
    assert line.code.strip().endswith("+ 1")


def test_star_is_not_a_comment_on_continued_lines():
    lines = classify("gen x = a ///\n    * b")
    assert lines[0].mask.endswith("lll")
    assert lines[1].continued is True
    assert lines[1].region is Region.CODE


def test_delimit_mode_tracking():
    text = "#delimit ;\nregress y x,\n    robust;\n#delimit cr\ndisplay 1"
    lines = classify(text)
    assert [line.semicolon_mode for line in lines] == [False, True, True, True, False]
    assert [line.continued for line in lines] == [False, False, True, False, False]


def test_unterminated_block_comment_raises_after_all_lines():
    source = classify_lines(iter_lines('display 1\n/* open\ndisplay 2\n'))
    seen = []
    with pytest.raises(ParseError) as info:
        for line in source:
            seen.append(line.number)
    assert seen == [1, 2, 3]
    assert info.value.line == 2


def test_parser_is_restartable(tmp_path: Path):
    do_file = tmp_path / "analysis.do"
    do_file.write_text("// header\ndisplay 1\n")
    parser = StataParser()
    first = list(parser.parse(do_file))
    second = list(parser.parse(do_file))
    assert first == second
    assert [line.number for line in first] == [1, 2]


def test_parser_reads_latin1(tmp_path: Path):
    do_file = tmp_path / "legacy.do"
    do_file.write_bytes('display "café"\n'.encode("latin-1"))
    [line] = list(StataParser().parse(do_file))
    assert line.region is Region.CODE
    assert line.text.startswith('display "caf')


def test_parser_missing_file(tmp_path: Path):
    with pytest.raises(InputError):
        list(StataParser().parse(tmp_path / "nope.do"))
