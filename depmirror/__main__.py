"""
Run depmirror as a module.

Usage:
    python -m depmirror <GitLabURL> <GitLabGroupName> <GitLabPrivateToken>
"""

from .main import cli

if __name__ == "__main__":
    cli()
