#!/usr/bin/env python3
"""
Session Lens - Start Script
Runs the backend API with uvicorn, bound to localhost unless told otherwise
"""
import argparse
import logging
import socket
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parent / "backend"


def port_in_use(host, port):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        return sock.connect_ex((host, port)) == 0


def main():
    """Main entry point"""
    # Settings are read from the environment; flags override them
    sys.path.insert(0, str(BACKEND_DIR))
    from config import Settings

    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description="Session Lens - session log search backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python start.py                  # API on 127.0.0.1:8000
  python start.py --port 9000      # Different port
  python start.py --debug          # Debug logging
  python start.py --reload         # Auto-reload on code changes
        """
    )
    parser.add_argument("--host", default=settings.host, help="Bind host")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    log_level = "DEBUG" if args.debug else settings.log_level
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if port_in_use(args.host, args.port):
        print(f"❌ Port {args.port} is already in use")
        return 1

    import uvicorn

    print("=" * 70)
    mode = "Session Lens"
    if args.debug:
        mode += " [DEBUG MODE]"
    print(f"🚀 {mode}")
    print("=" * 70)
    print(f"📂 Logs:  {settings.get_projects_dir()}")
    print(f"✅ API:   http://{args.host}:{args.port}")
    print("🛑 Press Ctrl+C to stop")

    uvicorn.run(
        "main:app",
        app_dir=str(BACKEND_DIR),
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\n🛑 Interrupted by user")
        sys.exit(0)
