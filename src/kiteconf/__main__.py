"""Allow ``python -m kiteconf``; also the target of the sudo re-exec."""

from kiteconf.cli import app

if __name__ == "__main__":
    app()
