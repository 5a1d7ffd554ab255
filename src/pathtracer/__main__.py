import sys

from src.pathtracer.cli import main

if __name__ == "__main__":
    sys.exit(main())
