"""Run the client with python -m dealyze_client."""

from .cli import main

if __name__ == "__main__":
    main()
