"""Main CLI entry point for the leaderboard generator."""

from leaderboard_generator.cli import app


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
