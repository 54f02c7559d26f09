"""
UI package for the Playbook application.

This package contains the Flask web server.
"""
from .web_app import WebAppState, create_app, run_web_app

__all__ = ["WebAppState", "create_app", "run_web_app"]
