"""
CLI layer for curl-runner.

A Typer application whose commands delegate to
:class:`~curl_runner.runner.CurlRunner`.  This package only parses
arguments and renders results with rich.

Entry point::

    curl-runner --help
"""

from curl_runner.cli.app import app

__all__ = ["app"]
