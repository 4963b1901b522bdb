import argparse
import json
import logging
import sys
from datetime import datetime

from . import __version__
from .query import DEFAULT, DEFAULT_PORT, query_info, query_players


def print_to_console(value):
    print(datetime.now().strftime("%Y-%m-%d %H:%M:%S: ") + value)


def split_target(target, port):
    # --port wins, then host:port, then the default query port
    if port is not None:
        if ':' in target:
            target = target.rsplit(':', 1)[0]
        return target, port
    if ':' in target:
        return target, None
    return target, DEFAULT_PORT


def print_info(info):
    print_to_console(f'Name:\t\t{info.name}')
    print_to_console(f'Map:\t\t{info.map_name}')
    print_to_console(f'Game:\t\t{info.game} ({info.folder}, app {info.app_id})')
    print_to_console(f'Players:\t{info.player_count}({info.bot_count})/{info.max_players}')
    print_to_console(f'Type:\t\t{info.server_type_name} | {info.environment_name}')
    print_to_console(f'Password:\t{"yes" if info.password_protected else "no"} | VAC: {"yes" if info.vac_secured else "no"}')
    print_to_console(f'Version:\t{info.version}')
    if info.port is not None:
        print_to_console(f'Game port:\t{info.port}')
    if info.steam_id is not None:
        print_to_console(f'Steam ID:\t{info.steam_id}')
    if info.source_tv_port is not None:
        print_to_console(f'SourceTV:\t{info.source_tv_name} ({info.source_tv_port})')
    if info.tags is not None:
        print_to_console(f'Tags:\t\t{info.tags}')
    if info.game_id is not None:
        print_to_console(f'Game ID:\t{info.game_id}')


def print_players(players):
    if not players:
        print_to_console('No players online.')
        return
    for player in players:
        minutes, seconds = divmod(int(player.duration), 60)
        print_to_console(f'`{player.index}`. {player.name}\tscore {player.score}\t{minutes}m{seconds:02d}s')


def main(argv=None):
    parser = argparse.ArgumentParser(prog='sourcequery', description='Query a Source Engine game server.')
    parser.add_argument('target', help='server address, HOST or HOST:PORT')
    parser.add_argument('-p', '--port', help=f'query port (default {DEFAULT_PORT})')
    parser.add_argument('--players', action='store_true', help='list players instead of server info')
    parser.add_argument('-t', '--timeout', type=float, default=DEFAULT, help='seconds to wait for each reply')
    parser.add_argument('--json', action='store_true', help='print the raw record as json')
    parser.add_argument('-v', '--verbose', action='store_true', help='log every datagram')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    address, port = split_target(args.target, args.port)
    query = query_players if args.players else query_info
    result = query(address, port, timeout=args.timeout)

    if not result.ok:
        print_to_console(f'ERROR: {args.target} {result.status.value}: {result.error}')
        return 1

    if args.json:
        if args.players:
            data = [player.to_dict() for player in result.value or ()]
        else:
            data = result.value.to_dict()
        print(json.dumps(data, ensure_ascii=False, indent=4))
    elif args.players:
        print_players(result.value)
    else:
        print_info(result.value)

    return 0


if __name__ == '__main__':
    sys.exit(main())
