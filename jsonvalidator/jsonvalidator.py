"""

Command line utility to validate JSON documents against a JSON schema.

"""


import argparse
import logging
import sys

from jsonvalidator import __version__
from jsonvalidator.helpers import JsonValidatorError
from jsonvalidator.validator import ValidatorOptions

COMMANDS = [
    {
        "command": "validate",
        "description": "Validate JSON instance files against a JSON schema",
        "args": [
            {"name": "input", "type": str, "nargs": "+", "help": "JSON, JSON array or JSONL files to validate"},
            {"name": "--schema", "type": str, "help": "Path to the schema file", "required": True},
            {"name": "--quiet", "type": bool, "help": "Suppress output; only set the exit code"},
            {"name": "--verbose", "type": bool, "help": "Log debug output to stderr"},
            {"name": "--property-name", "type": str, "help": "Property path of the root instance in messages"},
            {"name": "--no-defaults", "type": bool, "help": "Do not apply schema default values"},
            {"name": "--strict-attributes", "type": bool, "help": "Treat unknown schema keywords as errors"},
        ],
    },
]


def create_subparsers(subparsers, commands):
    """Create subparsers for the commands."""
    for command in commands:
        cmd_parser = subparsers.add_parser(command['command'], help=command['description'])
        for arg in command['args']:
            kwargs = {'help': arg['help']}
            if 'nargs' in arg:
                kwargs['nargs'] = arg['nargs']
            if arg['type'] is bool:
                kwargs['action'] = 'store_true'
            else:
                kwargs['type'] = arg['type']
            if arg['name'].startswith('--'):
                kwargs['required'] = arg.get('required', False)
            cmd_parser.add_argument(arg['name'], **kwargs)


def main(argv=None):
    """Main function for the command line utility."""
    parser = argparse.ArgumentParser(description='Validate JSON documents against a JSON schema.')
    parser.add_argument('--version', action='store_true', help='Print the version of jsonvalidator.')

    subparsers = parser.add_subparsers(dest='command')
    create_subparsers(subparsers, COMMANDS)

    args = parser.parse_args(argv)

    if args.version:
        print(f'jsonvalidator {__version__}')
        return

    if args.command is None:
        parser.print_help()
        return

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    options = ValidatorOptions(
        allow_unknown_attributes=not args.strict_attributes,
        skip_defaults=args.no_defaults,
        property_name=args.property_name or '',
    )

    # imported here so --help and --version stay fast
    from jsonvalidator.validatefile import validate

    try:
        validate(args.input, args.schema, quiet=args.quiet, options=options)
    except (JsonValidatorError, OSError, ValueError) as e:
        print("Error: ", str(e))
        sys.exit(2)


if __name__ == "__main__":
    main()
