"""Allow running qtbuild as ``python -m qtbuild``."""

from .cli import run

if __name__ == "__main__":
    run()
