#!/usr/bin/env python3
"""
Send the shooter introduction emails for tomorrow's shoots.

Runs the same job the web app schedules on weekday afternoons. Useful to
resend after an SMTP outage or to preview a day's emails.

Usage:
    python scripts/shooter_introduction_email.py [--date YYYY-MM-DD] [--dry-run]

Options:
    --date       Run as if today were this date (default: today)
    --dry-run    Print the emails instead of sending them
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import argparse
import logging
from datetime import date

from sqlmodel import Session

from studio_ops.core.database import engine
from studio_ops.notifications.mailer import EmailMessage, dispatch_email
from studio_ops.notifications.shooter_introduction import ShooterIntroductionEmail


def print_email(message: EmailMessage) -> None:
    """Dry-run dispatcher."""
    print(f"Subject:  {message.subject}")
    print(f"To:       {', '.join(message.to)}")
    print(f"Cc:       {', '.join(message.cc)}")
    if message.reply_to:
        print(f"Reply-To: {message.reply_to.get('name', '')} <{message.reply_to.get('email', '')}>")
    print()


def main(today: date | None = None, dry_run: bool = False):
    dispatch = print_email if dry_run else dispatch_email
    with Session(engine) as session:
        stats = ShooterIntroductionEmail(session, dispatch=dispatch, today=today).handle()

    print(f"Complete: {stats['sent']} sent, {stats['failed']} failed across {stats['orders']} orders")
    if stats["failed"]:
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Send shooter introduction emails")
    parser.add_argument("--date", type=date.fromisoformat, default=None, help="Run as if today were this date")
    parser.add_argument("--dry-run", action="store_true", help="Print emails instead of sending")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    main(today=args.date, dry_run=args.dry_run)
