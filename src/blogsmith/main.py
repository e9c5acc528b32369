"""Application entry point for Blogsmith backend server."""

from blogsmith.app import App
from blogsmith.config import Config
from blogsmith.logging import setup_logging
from blogsmith.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
