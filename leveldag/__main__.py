"""Entry point for running leveldag as a module: ``python -m leveldag [command]``."""

from __future__ import annotations


def main() -> None:
    """Main entry point for module execution."""
    from leveldag.cli import main as cli_main

    cli_main()


if __name__ == "__main__":
    main()
