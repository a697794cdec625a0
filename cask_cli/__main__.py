"""console script entrypoint for the cask CLI."""


def run() -> int:
    from .main import main as cli_main

    return cli_main()


def main() -> int:
    """Console entrypoint used by the ``cask`` script."""
    return run()


if __name__ == "__main__":
    raise SystemExit(run())
