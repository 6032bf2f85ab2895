import re
import enum


class Kind(enum.Enum):
    ALLOC = "alloc"
    FREE = "free"


class Handle:

    """
    Opaque memory block identifier, e.g. "0x55d0c2a4b2a0".
    Only equality and hashing are meaningful.
    """

    __slots__ = ( "token", )

    def __init__( self, token ):
        self.token = token

    def __eq__( self, other ):
        if not isinstance( other, Handle ):
            return NotImplemented
        return self.token == other.token

    def __hash__(self):
        return hash(self.token)

    def __str__(self):
        return self.token

    def __repr__(self):
        return f"Handle( {self.token} )"


class Event:

    def __init__( self, caller, kind, handle, size=None ):
        self.caller = caller
        self.kind = kind
        self.handle = handle
        self.size = size

    def __repr__(self):
        return f"Event( {self.caller}, {self.kind.name}, {self.handle}, {self.size} )"


class TraceParseError(ValueError):

    def __init__( self, message, filename=None, lineno=None, line=None ):
        super().__init__(message)
        self.message = message
        self.filename = filename
        self.lineno = lineno
        self.line = line

    def __str__(self):
        location = f"{self.filename or '<input>'}:{self.lineno or '?'}"
        if self.line is None:
            return f"{location}: {self.message}"
        return f"{location}: {self.message} : {self.line.rstrip()!r}"


re_pattern_hex_size = re.compile( r"[0-9a-fA-F]+" )

def parse_hex_size( hex_size, filename=None, lineno=None, line=None ):

    if not re_pattern_hex_size.fullmatch(hex_size):
        raise TraceParseError( f"malformed size 0x{hex_size}", filename, lineno, line )

    return int( hex_size, 16 )


class TraceFormat:

    """
    Base class of the mtrace line grammars.

    @ ./malloc_hook_test:[0x55d0c1e2a1b4] + 0x55d0c2a4b2a0 0x64  (main)
    @ ./malloc_hook_test:[0x55d0c1e2a1c8] - 0x55d0c2a4b2a0
    """

    name = None

    # kind character -> Kind
    kinds = {}

    line_pattern = None

    def parse_line( self, line, filename=None, lineno=None ):

        re_result = self.line_pattern.match(line)
        if not re_result:
            return None

        kind = self.kinds.get( re_result.group("kind") )
        if kind is None:
            return None

        size = self.parse_size( kind, re_result.group("size"), filename, lineno, line )

        return Event( re_result.group("caller"), kind, Handle( re_result.group("handle") ), size )

    def parse_size( self, kind, hex_size, filename, lineno, line ):
        raise NotImplementedError


class PermissiveFormat(TraceFormat):

    # size group optional, realloc halves (<, >) accepted

    name = "permissive"

    kinds = {
        "+" : Kind.ALLOC,
        ">" : Kind.ALLOC,
        "-" : Kind.FREE,
        "<" : Kind.FREE,
    }

    line_pattern = re.compile( r"@ (?P<timestamp>\S+):\[(?P<caller>\S+)\] (?P<kind>\S) (?P<handle>\S+)( 0x(?P<size>\S+))?" )

    def parse_size( self, kind, hex_size, filename, lineno, line ):

        if kind is Kind.FREE:
            return None

        if hex_size is None:
            return 0

        return parse_hex_size( hex_size, filename, lineno, line )


class StrictFormat(TraceFormat):

    # size group mandatory on every line, even on frees

    name = "strict"

    kinds = {
        "+" : Kind.ALLOC,
        "-" : Kind.FREE,
    }

    line_pattern = re.compile( r"@ (?P<timestamp>\S+):\[(?P<caller>\S+)\] (?P<kind>\S) (?P<handle>\S+) 0x(?P<size>\S+)" )

    def parse_size( self, kind, hex_size, filename, lineno, line ):

        size = parse_hex_size( hex_size, filename, lineno, line )

        if kind is Kind.FREE:
            return None

        return size


trace_formats = {
    PermissiveFormat.name : PermissiveFormat,
    StrictFormat.name : StrictFormat,
}

def get_trace_format( name ):

    try:
        return trace_formats[name]()
    except KeyError:
        raise ValueError( f"Unknown trace format : {name}" ) from None
