# Allows running with `python -m rft_architect`
import logging
import sys

from .ui.main_window import main

if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        logging.critical(f"Unhandled error: {e}", exc_info=True)
        sys.exit(1)
