import argparse
import logging

import uvicorn
from dotenv import load_dotenv

from tasklane.db.database import SessionLocal
from tasklane.logging_config import configure_logging
from tasklane.services.invitation_service import InvitationService

logger = logging.getLogger(__name__)


def serve(host: str = "127.0.0.1", port: int = 8000, reload: bool = True):
    uvicorn.run(
        "tasklane.main:app",
        host=host,
        port=port,
        reload=reload
    )


def expire_invitations() -> int:
    """Mark overdue pending invitations as expired. Safe to run from cron."""
    db = SessionLocal()
    try:
        count = InvitationService(db).expire_overdue_invitations()
    finally:
        db.close()
    print(f"Expired {count} invitation(s)")
    return count


def main(argv=None):
    load_dotenv()
    configure_logging()

    parser = argparse.ArgumentParser(prog="tasklane")
    subcommands = parser.add_subparsers(dest="command")

    serve_parser = subcommands.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--no-reload", action="store_true")

    subcommands.add_parser("expire-invitations", help="Expire overdue pending invitations")

    args = parser.parse_args(argv)

    if args.command == "expire-invitations":
        expire_invitations()
    elif args.command == "serve":
        serve(host=args.host, port=args.port, reload=not args.no_reload)
    else:
        serve()
