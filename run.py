import os
import sys
import argparse
from dotenv import load_dotenv
import uvicorn

# Load environment variables before importing the application modules
load_dotenv()


def _get_default_workers() -> int:
    """Read the default worker count from the environment and validate it."""
    value = os.getenv("UVICORN_WORKERS", "1")
    try:
        workers = int(value)
        return max(workers, 1)
    except ValueError:
        print(f"⚠️  UVICORN_WORKERS value '{value}' is not an integer. Using 1.")
        return 1


def main():
    """Start the status dashboard server."""
    from offload_monitor.config import settings

    parser = argparse.ArgumentParser(
        description="Offload Monitor - host, GPU and cloud offload status dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default run (HOST/PORT from the environment, 0.0.0.0:3000)
  python run.py

  # Change the port
  python run.py --port 8080

  # Development mode with auto reload
  python run.py --reload

URLs:
  - Dashboard:    http://localhost:3000/
  - Status API:   http://localhost:3000/api/status
  - Health check: http://localhost:3000/health
  - Metrics:      http://localhost:3000/metrics
        """
    )

    parser.add_argument(
        "--host",
        default=settings.HOST,
        help=f"Host to bind (default: {settings.HOST})"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Port to bind (default: PORT environment variable or {settings.PORT})"
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        default=False,
        help="Restart on code changes (development mode)"
    )

    parser.add_argument(
        "--no-reload",
        action="store_false",
        dest="reload",
        help="Disable auto reload (production mode, default)"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=_get_default_workers(),
        help="Number of uvicorn worker processes (default: UVICORN_WORKERS or 1)"
    )

    args = parser.parse_args()

    if args.workers < 1:
        print(f"⚠️  Worker count {args.workers} is invalid. Using 1.")
        args.workers = 1

    if args.reload and args.workers > 1:
        print("⚠️  Multiple workers are not supported in reload mode. Disabling reload.")
        args.reload = False

    print(f"\n{'='*60}")
    print(f"🐳 Offload Monitor ({settings.APP_ENV})")
    print(f"{'='*60}")
    print(f"📡 Server: http://{args.host}:{args.port}")
    print(f"🖥️  Dashboard: http://localhost:{args.port}/")
    print(f"❤️  Health Check: http://localhost:{args.port}/health")
    print(f"🧵 Workers: {args.workers}")
    print(f"{'='*60}\n")

    try:
        uvicorn.run(
            "offload_monitor.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=args.workers
        )
    except KeyboardInterrupt:
        print("\n\n👋 Shutting down...")
    except Exception as e:
        print(f"❌ Server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
