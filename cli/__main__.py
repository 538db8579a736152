"""Entry point for wordloom CLI client."""

import argparse
import sys

from cli.api_client import WordloomAPIClient
from cli.console import ConsoleUI, MODES


def main():
    parser = argparse.ArgumentParser(description='Wordloom - vocabulary study')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--user',
        default='default',
        help='User ID (default: default)'
    )
    parser.add_argument(
        '--mode',
        choices=MODES,
        help='Start a session in this mode right away'
    )
    parser.add_argument(
        '--limit',
        type=int,
        help='Normal session size (default 20, max 100)'
    )
    args = parser.parse_args()

    client = WordloomAPIClient(base_url=args.server, user_id=args.user)
    ui = ConsoleUI(client)

    try:
        ui.run(args.mode, args.limit)
    except KeyboardInterrupt:
        print('\nGoodbye!')
        sys.exit(0)


if __name__ == '__main__':
    main()
