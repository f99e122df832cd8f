"""Run one retrieval pass from the command line: python -m cms_airtable [config.yaml] [-v]"""
import argparse
import json
import logging
import sys

from cms_airtable.cms import retrieve_all
from cms_airtable.config_loader import load_config
from cms_airtable.errors import CmsError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="cms_airtable", description="Fetch configured Airtable tables and print them as JSON")
    parser.add_argument("config", nargs="?", help="YAML config (default: config/cms_airtable.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        data = retrieve_all(load_config(args.config))
    except CmsError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
