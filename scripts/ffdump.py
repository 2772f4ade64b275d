#!/usr/bin/env python3
'''
Print the attributes and the content size of the FlowFiles contained in a v3 stream.

 $ ffdump.py flowfiles.pkg
 $ cat flowfiles.pkg | ffdump.py -
'''
import sys
import os
import logging

from flowfile import iter_flowfiles, FlowFileException


if 'DEBUG' in os.environ:
    logging.basicConfig()
    logger = logging.getLogger('flowfile')
    logger.setLevel(logging.DEBUG)


def usage(progname):
    print('usage: %s <flowfile stream path or - for stdin>' % progname)
    sys.exit(1)


def dump_flowfile(idx, flowfile):
    content = flowfile.get_content()
    attributes = flowfile.get_attributes()
    print(f'''FlowFile #{idx}:
  Attributes:                        {len(attributes)}''')
    for key, value in attributes.items():
        print(f'''    {key:<32} {value}''')
    print(f'''  Content size:                      {len(content)} (bytes)''')


if __name__ == '__main__':
    if len(sys.argv) < 2:
        usage(sys.argv[0])

    path = sys.argv[1]
    source = sys.stdin.buffer if path == '-' else path

    try:
        for idx, flowfile in enumerate(iter_flowfiles(source)):
            dump_flowfile(idx, flowfile)
    except FlowFileException as e:
        print(f'error: {e}', file=sys.stderr)
        sys.exit(2)
