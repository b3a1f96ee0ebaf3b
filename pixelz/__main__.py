"""
Allow the pixelz package to be executed as a module.

This enables running the command line with:
    python -m pixelz mint ./image.png
"""

from pixelz.main import run

if __name__ == "__main__":
    run()
