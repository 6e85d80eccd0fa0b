"""Allow datalyr to be executable through `python -m datalyr`."""
from datalyr.cli import cli


if __name__ == "__main__":  # pragma: no cover
    cli(prog_name="datalyr")
