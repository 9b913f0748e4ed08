"""Application entry point for the Harbor-Ops filter backend."""

from harborops.app import App
from harborops.config import Config
from harborops.logging import setup_logging
from harborops.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
