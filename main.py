"""CT Simulator — Entry Point."""
import sys

from ctsim.application import main

if __name__ == "__main__":
    sys.exit(main())
