import sys
import re
import gzip

import boto3

# ---

region_name = "us-east-1"

# ---

def split_s3_path( s3_path ):
    re_pattern_s3_path = "s3://([^/]+)/(.+)"
    re_result = re.match( re_pattern_s3_path, s3_path )
    if not re_result:
        raise ValueError( f"Malformed S3 path : {s3_path}" )
    bucket = re_result.group(1)
    key = re_result.group(2)
    return bucket, key


def read_s3_lines( s3_client, s3_path ):
    bucket, key = split_s3_path(s3_path)
    response = s3_client.get_object( Bucket = bucket, Key = key )
    for line in response["Body"].iter_lines():
        yield line.decode("utf-8")


def read_file_lines( filename ):

    if filename.endswith(".gz"):
        fd = gzip.open( filename, "rt", encoding="utf-8" )
    else:
        fd = open( filename, "r", encoding="utf-8" )

    with fd:
        for line in fd:
            yield line


class TraceInputs:

    """
    Trace log sources in command line order, each one a lazy line iterator.

    "-"                 : standard input
    "s3://bucket/key"   : S3 object
    "trace.log.gz"      : gzip compressed file
    anything else       : plain text file
    """

    def __init__( self, paths, s3_client=None, region=None ):
        self.paths = list(paths) or [ "-" ]
        self.s3_client = s3_client
        self.region = region or region_name

    def get_s3_client(self):
        if self.s3_client is None:
            self.s3_client = boto3.client( "s3", region_name=self.region )
        return self.s3_client

    def open( self, path ):

        if path == "-":
            return iter(sys.stdin)

        if path.startswith("s3://"):
            return read_s3_lines( self.get_s3_client(), path )

        return read_file_lines(path)

    def __iter__(self):
        for path in self.paths:
            yield path, self.open(path)
