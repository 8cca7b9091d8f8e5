"""Allow running the bot as: python -m voltra [--config path]."""

import argparse

from voltra.trading.runner import main


def cli() -> None:
    parser = argparse.ArgumentParser(description="Volatility trading bot")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    args = parser.parse_args()
    main(config_path=args.config)


if __name__ == "__main__":
    cli()
