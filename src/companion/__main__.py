"""Command-line interface."""
from companion.main import main

if __name__ == "__main__":
    main()
