"""Main entry point for the pad_probe package."""
from pad_probe.cli import cli


def main():
    """Main entry point function."""
    cli()


if __name__ == "__main__":
    main()
