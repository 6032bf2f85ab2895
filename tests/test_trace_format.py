import pytest

from mtrace_analyzer.trace_format import (
    Kind, Handle, TraceParseError, PermissiveFormat, StrictFormat, get_trace_format, parse_hex_size
)


def test_Handle():

    assert Handle("0xaaa") == Handle("0xaaa")
    assert Handle("0xaaa") != Handle("0xAAA")
    assert hash(Handle("0xaaa")) == hash(Handle("0xaaa"))
    assert str(Handle("0xaaa")) == "0xaaa"

    with pytest.raises(TypeError):
        Handle("0xaaa") < Handle("0xbbb")


def test_PermissiveAlloc():

    parser = PermissiveFormat()

    event = parser.parse_line( "@ 1:[foo] + 0xaaa 0x10\n" )
    assert event.caller == "foo"
    assert event.kind is Kind.ALLOC
    assert event.handle == Handle("0xaaa")
    assert event.size == 16

    event = parser.parse_line( "@ ./a.out:[0x400536] > 0x602010 0x2710\n" )
    assert event.kind is Kind.ALLOC
    assert event.caller == "0x400536"
    assert event.size == 10000


def test_PermissiveFree():

    parser = PermissiveFormat()

    for kind_char in ( "-", "<" ):
        event = parser.parse_line( f"@ 2:[foo] {kind_char} 0xaaa\n" )
        assert event.kind is Kind.FREE
        assert event.handle == Handle("0xaaa")
        assert event.size is None

    # size on a free is never parsed
    event = parser.parse_line( "@ 2:[foo] - 0xaaa 0xzz\n" )
    assert event.kind is Kind.FREE


def test_PermissiveMissingSize():
    event = PermissiveFormat().parse_line( "@ 1:[foo] + 0xaaa\n" )
    assert event.kind is Kind.ALLOC
    assert event.size == 0


def test_PermissiveMalformedSize():

    with pytest.raises(TraceParseError) as excinfo:
        PermissiveFormat().parse_line( "@ 1:[foo] + 0xaaa 0xzz\n", "trace.log", 7 )

    assert excinfo.value.filename == "trace.log"
    assert excinfo.value.lineno == 7
    assert "trace.log:7" in str(excinfo.value)
    assert "0xzz" in str(excinfo.value)


def test_SymbolAnnotationIgnored():

    event = PermissiveFormat().parse_line( "@ ./malloc_hook_test:[0x55d0c1e2a1b4] + 0x55d0c2a4b2a0 0x64  (main)\n" )
    assert event.caller == "0x55d0c1e2a1b4"
    assert event.size == 100

    event = PermissiveFormat().parse_line( "@ ./malloc_hook_test:[0x55d0c1e2a1c8] - 0x55d0c2a4b2a0  (main)\n" )
    assert event.kind is Kind.FREE


@pytest.mark.parametrize( "line", [
    "garbage text\n",
    "= Start\n",
    "= End\n",
    "\n",
    "@ 1:[foo] * 0xaaa 0x10\n",
    "@ 1:[] + 0xaaa 0x10\n",
    " @ 1:[foo] + 0xaaa 0x10\n",
])
def test_IgnoredLines(line):
    assert PermissiveFormat().parse_line(line) is None
    assert StrictFormat().parse_line(line) is None


def test_StrictFormat():

    parser = StrictFormat()

    event = parser.parse_line( "@ 1:[foo] + 0xaaa 0x10\n" )
    assert event.kind is Kind.ALLOC
    assert event.size == 16

    event = parser.parse_line( "@ 2:[foo] - 0xaaa 0x10\n" )
    assert event.kind is Kind.FREE
    assert event.size is None

    # size group is mandatory
    assert parser.parse_line( "@ 2:[foo] - 0xaaa\n" ) is None
    assert parser.parse_line( "@ 1:[foo] + 0xaaa\n" ) is None

    # realloc halves are not part of this grammar
    assert parser.parse_line( "@ 1:[foo] > 0xaaa 0x10\n" ) is None
    assert parser.parse_line( "@ 1:[foo] < 0xaaa 0x10\n" ) is None


def test_StrictMalformedSize():

    with pytest.raises(TraceParseError):
        StrictFormat().parse_line( "@ 1:[foo] - 0xaaa 0xzz\n" )

    with pytest.raises(TraceParseError):
        StrictFormat().parse_line( "@ 1:[foo] + 0xaaa 0x1g\n" )


@pytest.mark.parametrize( "hex_size", [ "", "-10", "+10", "1_0", "0x10", "zz" ] )
def test_ParseHexSizeRejects(hex_size):
    with pytest.raises(TraceParseError):
        parse_hex_size(hex_size)


def test_ParseHexSize():
    assert parse_hex_size("bad") == 2989
    assert parse_hex_size("FF") == 255
    assert parse_hex_size("0") == 0


def test_GetTraceFormat():

    assert isinstance( get_trace_format("permissive"), PermissiveFormat )
    assert isinstance( get_trace_format("strict"), StrictFormat )

    with pytest.raises(ValueError):
        get_trace_format("json")
