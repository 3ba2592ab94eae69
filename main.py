"""
MongoDB Plugin - Main Entry Point

Runs the command-line interface, e.g.:

    python main.py ping
    python main.py --database gin_admin indexes init
"""

from mongo_plugin.cli import cli

if __name__ == "__main__":
    cli()
