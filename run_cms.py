"""Fetch all tables in config/cms_airtable.yaml and print them. Usage: python run_cms.py [config.yaml]"""
import sys
from pathlib import Path

root = Path(__file__).resolve().parent
sys.path.insert(0, str(root / "src"))

from cms_airtable.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
