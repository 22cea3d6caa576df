"""Allow ``python -m curl_runner``."""

from curl_runner.cli.app import app

app()
