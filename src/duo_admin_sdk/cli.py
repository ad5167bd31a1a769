"""
Command-line interface for Duo Admin Python SDK
Provides credential setup, liveness checks and a few read-only listings
"""

import argparse
import getpass
import json
import os
import sys
from typing import Optional

from .admin import AdminApi
from .config import (
    ENV_SECRET_KEY,
    ClientConfig,
    configure_logging,
    load_config_from_file,
    load_credentials_from_env,
)
from .credentials.store import CredentialStore
from .exceptions import DuoSDKError
from .http_client import AdminApiClient
from .response import ApiResult
from .version import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='duo-admin',
        description='Duo Admin API command-line interface'
    )
    
    parser.add_argument(
        '--version',
        action='version',
        version=f'Duo Admin Python SDK {__version__}'
    )
    parser.add_argument(
        '--credential-file',
        help='Encrypted credential file (default: per-user credential file)'
    )
    parser.add_argument(
        '--passphrase',
        help='Passphrase protecting the credential file (OS keyring used otherwise)'
    )
    parser.add_argument(
        '--config',
        help='JSON file with client transport settings such as timeout'
    )
    parser.add_argument(
        '--log-level',
        default='WARNING',
        help='Logging level (default: WARNING)'
    )
    
    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    
    configure_parser = subparsers.add_parser('configure', help='Save integration credentials')
    configure_parser.add_argument('--ikey', required=True, help='Integration key')
    configure_parser.add_argument('--host', required=True, help='API hostname')
    configure_parser.add_argument(
        '--skey',
        help=f'Secret key (read from {ENV_SECRET_KEY} or prompted when omitted)'
    )
    configure_parser.add_argument(
        '--aux-key',
        action='append',
        default=[],
        metavar='NAME=VALUE',
        help='Auxiliary named secret, may be repeated'
    )
    
    ping_parser = subparsers.add_parser('ping', help='Check service liveness (unauthenticated)')
    ping_parser.add_argument('--host', help='API hostname (defaults to saved credentials)')
    
    users_parser = subparsers.add_parser('users', help='User commands')
    users_subparsers = users_parser.add_subparsers(dest='users_command', help='User operations')
    users_list_parser = users_subparsers.add_parser('list', help='List users')
    users_list_parser.add_argument('--username', help='Only return this username')
    
    groups_parser = subparsers.add_parser('groups', help='Group commands')
    groups_subparsers = groups_parser.add_subparsers(dest='groups_command', help='Group operations')
    groups_subparsers.add_parser('list', help='List groups')
    
    subparsers.add_parser('info', help='Show account summary')
    
    return parser


def load_store(args) -> CredentialStore:
    """Load credentials from the environment or the credential file."""
    store = CredentialStore()
    env_credentials = load_credentials_from_env()
    if env_credentials and not args.credential_file:
        store.initialize(**env_credentials)
    else:
        store.load(args.credential_file, args.passphrase)
    return store


def load_client_config(args) -> ClientConfig:
    """Load transport settings from --config, or use the defaults."""
    if args.config:
        return load_config_from_file(args.config)
    return ClientConfig()


def print_result(result: ApiResult) -> int:
    if not result.ok:
        print(f"API error: {result.error}", file=sys.stderr)
        return 1
    print(json.dumps(result.payload, indent=2, sort_keys=True))
    return 0


def handle_configure_command(args) -> int:
    """Handle saving credentials."""
    secret_key = args.skey or os.environ.get(ENV_SECRET_KEY) or getpass.getpass('Secret key: ')
    
    auxiliary_keys = {}
    for item in args.aux_key:
        name, sep, value = item.partition('=')
        if not sep or not name:
            print(f"Error: auxiliary keys must be NAME=VALUE, got {item!r}", file=sys.stderr)
            return 1
        auxiliary_keys[name] = value
    
    store = CredentialStore()
    store.initialize(args.ikey, secret_key, args.host, auxiliary_keys)
    metadata = store.persist(args.credential_file, args.passphrase)
    print(f"Credentials saved to {metadata.path} ({metadata.storage_type})")
    return 0


def handle_ping_command(args) -> int:
    """Handle the unauthenticated liveness check."""
    store = CredentialStore() if args.host else load_store(args)
    with AdminApiClient(store, load_client_config(args)) as client:
        return print_result(client.ping(host=args.host))


def handle_users_command(args) -> int:
    if args.users_command != 'list':
        print("Error: No users subcommand specified", file=sys.stderr)
        return 1
    with AdminApiClient(load_store(args), load_client_config(args)) as client:
        return print_result(AdminApi(client).list_users(username=args.username))


def handle_groups_command(args) -> int:
    if args.groups_command != 'list':
        print("Error: No groups subcommand specified", file=sys.stderr)
        return 1
    with AdminApiClient(load_store(args), load_client_config(args)) as client:
        return print_result(AdminApi(client).list_groups())


def handle_info_command(args) -> int:
    with AdminApiClient(load_store(args), load_client_config(args)) as client:
        return print_result(AdminApi(client).get_info_summary())


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI
    
    Args:
        argv: Command line arguments (None to use sys.argv)
        
    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]
    
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    
    handlers = {
        'configure': handle_configure_command,
        'ping': handle_ping_command,
        'users': handle_users_command,
        'groups': handle_groups_command,
        'info': handle_info_command,
    }
    
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    
    try:
        return handler(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except DuoSDKError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
