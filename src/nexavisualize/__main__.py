"""Command-line interface."""
from nexavisualize.main import main

if __name__ == "__main__":
    main()
