"""Allow ``python -m chaincompare``."""

from chaincompare.cli.app import app

if __name__ == "__main__":
    app()
