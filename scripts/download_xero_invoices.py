#!/usr/bin/env python3
"""
Download invoice PDFs from Xero.

Usage:
    python scripts/download_xero_invoices.py INVOICE_ID [INVOICE_ID ...] [--directory DIR]
    python scripts/download_xero_invoices.py --check

Options:
    --directory  Where to save the PDFs (default: INVOICE_FILE_DIRECTORY)
    --check      Only report missing Xero settings
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import argparse
import logging

from studio_ops.invoicing.xero import XeroClient


def main(invoice_ids: list[str], directory: str | None = None, check: bool = False):
    client = XeroClient()
    try:
        issues = client.diagnostics()
        if check or issues:
            for issue in issues:
                print(f"  - {issue}")
            print("Xero settings OK" if not issues else "Xero is not configured")
            if issues:
                sys.exit(1)
            return

        failed = client.download_invoice_pdfs(invoice_ids, directory)
    finally:
        client.close()

    print(f"Complete: {len(invoice_ids) - len(failed)} downloaded, {len(failed)} failed")
    if failed:
        print(f"Failed: {', '.join(failed)}")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Download invoice PDFs from Xero")
    parser.add_argument("invoice_ids", nargs="*", help="Xero invoice ids")
    parser.add_argument("--directory", default=None, help="Where to save the PDFs")
    parser.add_argument("--check", action="store_true", help="Only report missing Xero settings")
    args = parser.parse_args()
    if not args.invoice_ids and not args.check:
        parser.error("give at least one invoice id, or --check")

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    main(args.invoice_ids, directory=args.directory, check=args.check)
