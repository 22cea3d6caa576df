"""Filesystem collaborators: script discovery, log files and JSON reports."""

from curl_runner.storage.discovery import list_jobs, scan_scripts
from curl_runner.storage.logs import LogSink
from curl_runner.storage.reports import read_json, write_json

__all__ = ["list_jobs", "scan_scripts", "LogSink", "read_json", "write_json"]
