#!/usr/bin/env python3
"""
Main entry point for the Playbook web application.

This script loads the playbooks from the remote API and launches the
Flask-based JSON server.
"""
import logging
import os

from playbook.ui.web_app import run_web_app
from playbook.utils.constants import DEFAULT_WEB_HOST, DEFAULT_WEB_PORT

if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("PLAYBOOK_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    run_web_app(
        host=os.environ.get("PLAYBOOK_WEB_HOST", DEFAULT_WEB_HOST),
        port=int(os.environ.get("PLAYBOOK_WEB_PORT", DEFAULT_WEB_PORT))
    )
