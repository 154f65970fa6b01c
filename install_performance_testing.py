#!/usr/bin/env python3
"""
install_performance_testing.py - K6 Performance Testing Installer

Installs and drives k6 load tests for the conexao-de-sorte backend services.

SYNOPSIS:
  install_performance_testing.py [COMMAND] [SERVICE] [options]
  install_performance_testing.py help

DESCRIPTION:
  By default runs the full installation:
  1. Checks prerequisites (kubectl, cluster access, target services)
  2. Installs the k6-operator
  3. Applies the test configuration (scripts ConfigMap, daily CronJob)
  4. Generates per-service K6 manifests in individual-tests/
  5. Configures Prometheus scraping when Prometheus is present
  6. Runs one validation test against the gateway
  7. Prints usage information

  Cluster credentials come from the current kubectl context.
"""

import sys
import argparse
import traceback
from typing import List, Optional

from lib.errors import InstallerError
from lib.installer import PerformanceTestingInstaller
from models.service import SERVICE_CATALOG, VALIDATION_SERVICE
from models.settings import Settings
from utils.console import Colors


COMMANDS = ('install', 'test', 'validate', 'uninstall', 'help')


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser"""
    parser = argparse.ArgumentParser(
        prog='install_performance_testing.py',
        description='K6 Performance Testing Installer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
Examples:
  # Full installation
  %(prog)s

  # Run the load test for one service
  %(prog)s test autenticacao

  # Re-run the validation test
  %(prog)s validate --wait 120

  # Remove everything
  %(prog)s uninstall
        """
    )

    parser.add_argument('command', nargs='?', default='install',
                        help='install (default), test, validate, uninstall or help')
    parser.add_argument('service', nargs='?', default=None,
                        help=f'Service for the test command (default: {VALIDATION_SERVICE})')
    parser.add_argument('-h', '--help', action='store_true', dest='show_help',
                        help='Show this help')

    opts = parser.add_argument_group('Options')
    opts.add_argument('-n', '--namespace', dest='k6_namespace',
                      help='Namespace for k6 resources (default: K6_NAMESPACE or k6-system)')
    opts.add_argument('--target-namespace',
                      help='Namespace of the target services (default: TARGET_NAMESPACE or default)')
    opts.add_argument('--operator-version',
                      help='k6-operator release (default: K6_OPERATOR_VERSION or v0.0.14)')
    opts.add_argument('--wait', type=int, dest='validation_wait',
                      help='Seconds to wait before reading the validation result (default: 60)')
    opts.add_argument('--kubectl',
                      help='kubectl binary (default: KUBECTL or kubectl)')
    opts.add_argument('--base-dir',
                      help='Directory holding k6-performance-tests.yaml and individual-tests/')
    opts.add_argument('--debug', action='store_true', default=None,
                      help='Echo every kubectl command')

    return parser


def print_usage():
    """Print command and service overview"""
    print("📊 Performance Testing Installer")
    print()
    print("Usage: install_performance_testing.py [COMMAND] [SERVICE]")
    print()
    print("Commands:")
    print("  install              Install complete K6 Performance Testing (default)")
    print("  test [SERVICE]       Run the test for a specific service")
    print("  validate             Run the validation test")
    print("  uninstall            Uninstall K6 completely")
    print("  help                 Show this help")
    print()
    print("Available services:")
    for service in SERVICE_CATALOG.values():
        print(f"  • {service.name:<18} {service.description}")


def resolve_settings(args: argparse.Namespace) -> Settings:
    return Settings.from_env(
        operator_version=args.operator_version,
        k6_namespace=args.k6_namespace,
        target_namespace=args.target_namespace,
        validation_wait=args.validation_wait,
        kubectl=args.kubectl,
        base_dir=args.base_dir,
        debug=args.debug,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args, extra = parser.parse_known_args(argv)

    if args.show_help or args.command not in COMMANDS or args.command == 'help':
        print_usage()
        print()
        parser.print_help()
        return 0

    # Known commands still reject stray arguments
    if extra:
        parser.error(f"unrecognized arguments: {' '.join(extra)}")

    try:
        installer = PerformanceTestingInstaller(resolve_settings(args))

        if args.command == 'install':
            installer.install()
        elif args.command == 'test':
            installer.run_service_test(args.service or VALIDATION_SERVICE)
        elif args.command == 'validate':
            installer.run_validation_test()
        elif args.command == 'uninstall':
            installer.uninstall()
    except InstallerError as e:
        Colors.error(str(e))
        return 1

    return 0


def cli():
    """Console script entry point"""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print()
        Colors.warning("Operation cancelled by user")
        sys.exit(130)
    except Exception as e:
        Colors.error(f"Unexpected error: {e}")
        traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    cli()
