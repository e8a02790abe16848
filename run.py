#!/usr/bin/env python3
"""
Token Wallet Entry Point

Starts the FastAPI server with the host and port from WALLET_* settings.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from token_wallet.api import run_server
from token_wallet.config import get_config


if __name__ == "__main__":
    config = get_config()

    print("Starting Token Wallet...")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(
            host=config.api_host,
            port=config.api_port,
            debug=config.api_debug
        )
    except KeyboardInterrupt:
        print("\nShutting down Token Wallet...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
