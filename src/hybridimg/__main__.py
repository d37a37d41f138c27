"""
Command-line entry for the hybridimg package.

Usage
-----
$ python -m hybridimg --help
"""

from hybridimg.cli.main import cli


if __name__ == "__main__":
    cli()
