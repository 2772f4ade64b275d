#!/usr/bin/env python3
'''
Build a v3 FlowFile from a file, with the attributes indicated as key=value.

 $ ffpack.py data.csv out.flowfile filename=data.csv mime.type=text/csv
'''
import sys
import os
import logging

from flowfile import FlowFileV3


if 'DEBUG' in os.environ:
    logging.basicConfig()
    logger = logging.getLogger('flowfile')
    logger.setLevel(logging.DEBUG)


def usage(progname):
    print('usage: %s <content path> <output path> [key=value ...]' % progname)
    sys.exit(1)


def parse_attributes(args):
    attributes = {}
    for arg in args:
        key, sep, value = arg.partition('=')
        if not sep:
            raise ValueError(f'attribute \'{arg}\' is not in the form key=value')
        attributes[key] = value

    return attributes


if __name__ == '__main__':
    if len(sys.argv) < 3:
        usage(sys.argv[0])

    path_content, path_output = sys.argv[1:3]

    with open(path_content, 'rb') as f:
        content = f.read()

    try:
        attributes = parse_attributes(sys.argv[3:])
    except ValueError as e:
        print(f'error: {e}', file=sys.stderr)
        sys.exit(2)

    flowfile = FlowFileV3().set_attributes(attributes).set_content(content)

    size = flowfile.serialize(path_output)

    print(f'written {size} bytes into {path_output}')
