"""Run the Trade Winds terminal game: python -m tradewinds"""

from .interface.cli import main

if __name__ == "__main__":
    main()
