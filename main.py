from netmon.cli import cli_app


def main() -> None:
    cli_app()


if __name__ == "__main__":
    main()
