#!/usr/bin/env python
"""
Run the Offer Pricing API under uvicorn.

Usage:
    python scripts/run_api.py [--host 0.0.0.0] [--port 8000] [--no-reload] [--offers path/to/offers.csv]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Run the Offer Pricing API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload")
    parser.add_argument("--offers", help="Offers CSV to serve (sets OFFER_PRICING_OFFERS_CSV)")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent

    # Child process needs src on its path
    env = os.environ.copy()
    src_path = str(project_root / "src")
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src_path, env.get("PYTHONPATH")) if p)
    if args.offers:
        env["OFFER_PRICING_OFFERS_CSV"] = str(Path(args.offers).resolve())

    cmd = [
        sys.executable, "-m", "uvicorn",
        "offer_pricing.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if not args.no_reload:
        cmd.append("--reload")

    print(f"Starting Offer Pricing API on {args.host}:{args.port}...")
    try:
        subprocess.run(cmd, env=env, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
