# mztab_validator/cli/main.py
import argparse
import sys

from mztab_validator.cli import clean, config as config_cli, logging as logging_cli, validate
from mztab_validator.cli.common import die
from mztab_validator.cli.env import extract_env_files, load_env_files
from mztab_validator.errors import MzTabValidatorError


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mztab-validator",
        description="Validate and clean mzTab result files of a repository submission",
    )
    parser.add_argument(
        "--env-file",
        metavar="PATH",
        help="Load KEY=value settings before running (repeatable, any position)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="Validate PSM spectrum references")
    validate.register_arguments(validate_parser)

    clean_parser = subparsers.add_parser("clean", help="Rewrite ms_run locations")
    clean.register_arguments(clean_parser)

    logging_parser = subparsers.add_parser("logging", help="Logging utilities")
    logging_subparsers = logging_parser.add_subparsers(dest="subcommand", required=True)
    logging_cli.register_subcommands(logging_subparsers)

    config_parser = subparsers.add_parser("config", help="Environment settings")
    config_subparsers = config_parser.add_subparsers(dest="subcommand", required=True)
    config_cli.register_subcommands(config_subparsers)

    return parser


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    env_files, argv = extract_env_files(argv)
    if env_files:
        load_env_files(env_files)

    args = build_parser().parse_args(argv)

    try:
        if args.command == "validate":
            validate.dispatch(args)
        elif args.command == "clean":
            clean.dispatch(args)
        elif args.command == "logging":
            logging_cli.dispatch(args)
        elif args.command == "config":
            config_cli.dispatch(args)
    except (MzTabValidatorError, OSError, ValueError) as exc:
        die(str(exc), exc)


if __name__ == "__main__":
    main()
