#!/usr/bin/env python3
"""Create the KV space and its primary index on a Tarantool instance.

Usage: python3 scripts/init_space.py [--apply] [--host HOST:PORT] [--user U] [--password P]

Connection settings default to the server configuration (environment and
`data/config/server_config.yml`). Without `--apply` the Lua that would be
run is printed and nothing is changed. Existing spaces and indexes are left
alone (`if_not_exists`).
"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import tarantool  # noqa: E402
from tarantool.error import Error as TarantoolError  # noqa: E402

from kvstore_lib.config.config import load_config  # noqa: E402
from kvstore_lib.storage.connection import parse_address  # noqa: E402

LUA_TEMPLATE = """
local space = box.schema.space.create({space!r}, {{
    if_not_exists = true,
    format = {{
        {{name = 'key', type = 'string'}},
        {{name = 'value', type = 'map'}},
    }},
}})
space:create_index({index!r}, {{
    type = 'TREE',
    unique = true,
    parts = {{'key'}},
    if_not_exists = true,
}})
return space.id
"""


def build_lua(space: str, index: str) -> str:
    return LUA_TEMPLATE.format(space=space, index=index)


def main(argv=None):
    cfg = load_config()
    p = argparse.ArgumentParser()
    p.add_argument('--host', default=cfg.tarantool_host, help='Tarantool address host:port')
    p.add_argument('--user', default=cfg.tarantool_user)
    p.add_argument('--password', default=cfg.tarantool_pass)
    p.add_argument('--space', default=cfg.space)
    p.add_argument('--index', default=cfg.index)
    p.add_argument('--apply', action='store_true', help='actually create the space')
    args = p.parse_args(argv)

    lua = build_lua(args.space, args.index)
    if not args.apply:
        print("NOTE: running in dry-run mode. No changes will be made.")
        print("To create the space, re-run with --apply")
        print(lua)
        return 0

    host, port = parse_address(args.host)
    try:
        conn = tarantool.Connection(host, port, user=args.user or None, password=args.password or None)
    except TarantoolError as e:
        print(f"Failed to connect to Tarantool at {args.host}: {e}")
        return 2
    try:
        resp = conn.eval(lua)
    except TarantoolError as e:
        print(f"Space creation failed: {e}")
        return 2
    finally:
        conn.close()
    print(f"Space {args.space!r} ready (id={resp.data[0] if resp.data else '?'}) with index {args.index!r}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
