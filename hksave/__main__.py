"""Allow `python -m hksave`."""

from .cli import main

if __name__ == "__main__":
    main()
