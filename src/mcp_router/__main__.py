"""Entry point for running the router as a module.

Usage:
    python -m mcp_router                      # HTTP transport
    python -m mcp_router --transport stdio    # stdio transport
"""

from mcp_router.app import main

if __name__ == "__main__":
    main()
