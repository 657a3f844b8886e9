"""
Main application entry point
Swaps the input token and deposits the output into the lending pool
"""
import sys

from swaplend.cli import main


if __name__ == "__main__":
    sys.exit(main())
