"""CLI entry point for the usersync webhook server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="usersync-server",
        description="usersync: identity provider webhook receiver",
    )
    parser.add_argument("--host", default=None, help="Bind host (default: USERSYNC_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: USERSYNC_PORT or 8080)")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite database, console logs",
    )
    args = parser.parse_args(argv)

    if args.local:
        os.environ["USERSYNC_LOCAL_MODE"] = "1"
        os.environ["USERSYNC_JSON_LOGS"] = "0"

    import uvicorn

    from usersync.config import Settings

    config = Settings()
    uvicorn.run(
        "usersync.main:app",
        host=args.host or config.host,
        port=args.port or config.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
