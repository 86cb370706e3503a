"""Allow running the server with ``python -m darah_server``."""

from .cli import main

if __name__ == "__main__":
    main()
