"""Allows `python -m doula_api`."""

from doula_api.main import run

if __name__ == "__main__":
    run()
