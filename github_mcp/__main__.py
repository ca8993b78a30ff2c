# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Entry point: python -m github_mcp [--stdio] [--config PATH]
"""

import argparse
import asyncio
import sys
from pathlib import Path

from github_mcp.core.config import get_config, load_config, require_github_token
from github_mcp.core.logging import get_logger
from github_mcp.dispatcher import Dispatcher
from github_mcp.github_client import GitHubClient
from github_mcp.response_cache import ResponseCache
from github_mcp.server import GitHubMCPServer
from github_mcp.stdio_transport import StdioTransport
from github_mcp.tools import build_github_registry


def build_dispatcher(config, token: str) -> Dispatcher:
    """Wire registry, cache and backend into a dispatcher"""
    client = GitHubClient(
        token=token,
        base_url=config.github_api_url,
        timeout=config.http_timeout
    )
    cache = ResponseCache(
        ttl_seconds=config.cache_ttl_seconds,
        max_entries=config.cache_max_entries
    )
    return Dispatcher(build_github_registry(), client, cache=cache, config=config)


async def _run_stdio(config, token: str):
    dispatcher = build_dispatcher(config, token)
    try:
        await StdioTransport(dispatcher).run()
    finally:
        await dispatcher.backend.close()


def main():
    parser = argparse.ArgumentParser(description="GitHub MCP Server")
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Serve JSON-RPC over stdin/stdout instead of HTTP"
    )
    parser.add_argument(
        "--config",
        help="Path to YAML config (default: $GITHUB_MCP_CONFIG_PATH or configs/server.yaml)"
    )
    args = parser.parse_args()

    config = load_config(args.config) if args.config else get_config()

    # stdout carries protocol traffic in stdio mode
    get_logger(
        "github_mcp",
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=Path(config.log_file) if config.log_file else None,
        stream=sys.stderr if args.stdio else sys.stdout
    )

    token = require_github_token()

    if args.stdio:
        asyncio.run(_run_stdio(config, token))
        return

    dispatcher = build_dispatcher(config, token)
    server = GitHubMCPServer(config, dispatcher, backend_close=dispatcher.backend.close)
    server.run()


if __name__ == "__main__":
    main()
