"""Entry point for ``python -m ticktick_cli.mcp_server``."""

from ticktick_cli.mcp_server import main

main()
