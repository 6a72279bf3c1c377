"""
Entry point for the loan prepayment vs invest simulator.

Usage:
    python main.py                # launches the web app at localhost:5000
    python main.py --cli          # runs the terminal interface
    python main.py --cli --schedule --pdf report.pdf
"""

import argparse
import logging

import config as cfg


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Loan prepayment vs invest simulator",
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run in terminal mode instead of launching the web app",
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="CLI only: print the full month-by-month table",
    )
    parser.add_argument(
        "--pdf",
        default=cfg.PDF_PATH,
        help="CLI only: where to write the PDF report ('' to skip)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=cfg.WEB_PORT,
        help="Web app port",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log simulation details",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cli:
        from cli import run_cli
        run_cli(pdf_path=args.pdf or None, show_schedule=args.schedule)
    else:
        from app import run_web
        run_web(port=args.port)


if __name__ == "__main__":
    main()
