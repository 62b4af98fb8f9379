"""

Command line utility to validate a JSON instance against a JSON schema and
narrate which parts of the instance satisfy which parts of the schema.

"""


import argparse
import logging
import sys

from jsonschema.exceptions import SchemaError

from schemaprobe import _version
from schemaprobe.common import SchemaProbeError
from schemaprobe.config import DisplayOptions
from schemaprobe.report import render_summary
from schemaprobe.validate import validate_file

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='schemaprobe',
        description='Validate a JSON instance against a JSON schema and report, path by path, what matches.')
    parser.add_argument('schema', nargs='?', help='Path or URL of the JSON schema document.')
    parser.add_argument('instance', nargs='?', help='Path or URL of the JSON instance document.')
    parser.add_argument('-o', '--hide-optional', dest='hide_optional', action='store_true',
                        help='Do not list optional properties that are absent.')
    parser.add_argument('-e', '--only-errors', dest='only_errors', action='store_true',
                        help='Only list failures, not passing values.')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show candidate detail for satisfied allOf/anyOf/oneOf too.')
    parser.add_argument('-d', '--debug', action='store_true',
                        help='Trace dispatch decisions and enable debug logging.')
    parser.add_argument('-l', '--list', dest='list_violations', action='store_true',
                        help='List all violations again after the summary count.')
    parser.add_argument('--version', action='store_true', help='Print the version of schemaprobe.')
    return parser


def main(argv=None) -> int:
    """Main function for the command line utility."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f'schemaprobe {_version.version}')
        return EXIT_VALID

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    if not args.schema or not args.instance:
        parser.print_usage()
        return EXIT_VALID

    options = DisplayOptions.from_args(args)
    try:
        print()
        result = validate_file(args.schema, args.instance, options, sys.stdout)
    except (SchemaProbeError, SchemaError) as e:
        print("Error: ", str(e))
        return EXIT_ERROR

    sys.stdout.write(render_summary(result.errors, args.list_violations))
    return EXIT_VALID if result.is_valid else EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
