import sys
import argparse

import botocore.exceptions

from mtrace_analyzer.trace_format import Kind, TraceParseError, get_trace_format, trace_formats
from mtrace_analyzer.live_blocks import LiveBlockTable
from mtrace_analyzer.report import collect_caller_stats, write_report
from mtrace_analyzer.trace_input import TraceInputs

# ---

progress_interval = 100000


def log( *args, **kwargs ):
    print( *args, file=sys.stderr, flush=True, **kwargs )


class MtraceAnalyzer:

    def __init__( self, trace_format, verbose=False ):
        self.trace_format = trace_format
        self.verbose = verbose
        self.table = LiveBlockTable()
        self.num_lines = 0
        self.num_events = 0

    def replay( self, lines, filename=None ):

        if self.verbose:
            log( "Parsing trace log :", filename or "<input>" )

        for lineno, line in enumerate( lines, start=1 ):

            self.num_lines += 1

            if self.verbose and lineno % progress_interval == 0:
                log( ".", end="" )

            event = self.trace_format.parse_line( line, filename, lineno )
            if event is None:
                continue

            self.num_events += 1

            if event.kind is Kind.ALLOC:
                self.table.record( event.handle, event.size, event.caller )
            else:
                self.table.release( event.handle )

        if self.verbose and self.num_lines >= progress_interval:
            log("")

    def replay_all( self, trace_inputs ):
        for filename, lines in trace_inputs:
            self.replay( lines, filename )

    def caller_stats(self):
        return collect_caller_stats( self.table.items() )

    def report( self, fd=None ):

        if self.verbose:
            log( "Num lines :", self.num_lines )
            log( "Num events :", self.num_events )
            log( "Num live blocks :", len(self.table) )
            log( "Num overwritten allocations :", self.table.num_overwritten )
            log( "Num frees of unknown blocks :", self.table.num_unknown_frees )

        write_report( self.caller_stats(), fd )


def main( argv=None ):

    argparser = argparse.ArgumentParser( description='analyze mtrace log and report blocks still allocated at the end of the trace, per caller' )
    argparser.add_argument('logfile', nargs='*', help='trace log filename, s3://bucket/key, or - for stdin (default: stdin)')
    argparser.add_argument('--format', action='store', choices=sorted(trace_formats), default='permissive', help='trace line format (default: permissive)')
    argparser.add_argument('--region', action='store', default=None, help='AWS region used to read s3:// trace logs')
    argparser.add_argument('--verbose', action='store_true', help='print progress and summary to stderr')
    args = argparser.parse_args(argv)

    analyzer = MtraceAnalyzer( get_trace_format(args.format), verbose=args.verbose )

    try:
        analyzer.replay_all( TraceInputs( args.logfile, region=args.region ) )
    except ( TraceParseError, OSError, ValueError, botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError ) as e:
        log( "Error :", e )
        sys.exit(1)

    analyzer.report()


if __name__ == "__main__":
    main()
