import sys
import collections


CallerStat = collections.namedtuple( "CallerStat", [ "caller", "count", "size" ] )


def collect_caller_stats( live_blocks ):

    """
    Group live blocks by caller.

    live_blocks : iterable of ( handle, LiveBlock ) pairs
    returns : list of CallerStat, largest total size first, ties by caller name
    """

    stats = {}

    for handle, block in live_blocks:

        if block.caller not in stats:
            stats[block.caller] = [ 0, 0 ]

        stats[block.caller][0] += 1 # number of blocks
        stats[block.caller][1] += block.size # total size

    caller_stats = [ CallerStat( caller, count, size ) for caller, ( count, size ) in stats.items() ]
    caller_stats.sort( key = lambda stat : ( -stat.size, stat.caller ) )

    return caller_stats


def format_report( caller_stats ):

    lines = [ "# caller\tcount\ttotal_size" ]

    total_count = 0
    total_size = 0

    for stat in caller_stats:
        lines.append( f"{stat.caller}\t{stat.count}\t{stat.size}" )
        total_count += stat.count
        total_size += stat.size

    lines.append("")
    lines.append( f"total\t{total_count}\t{total_size}" )

    return lines


def write_report( caller_stats, fd=None ):

    if fd is None:
        fd = sys.stdout

    for line in format_report(caller_stats):
        fd.write( line + "\n" )

    fd.flush()
