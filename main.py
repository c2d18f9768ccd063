"""
Entry point for the SEO analyzer
"""
import sys

from app import main


if __name__ == "__main__":
    sys.exit(main())
