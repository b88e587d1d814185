"""
Duolingo Enforcer
=================
Polls Duolingo's private API and keeps a "done for today" marker file in
sync with today's XP. Something else (a browser extension, a firewall
rule, a login hook) blocks distractions while the marker is missing.

A JWT from a logged-in browser session is read from ~/.duo_jwt_token,
or from JWT_TOKEN / DUO_JWT, or pasted into the UI at
http://127.0.0.1:4550/.

Usage:
    python duo_enforcer.py [--host HOST] [--port PORT] [--log-level LEVEL]
"""

import sys

from duo_core.runner import main

if __name__ == "__main__":
    sys.exit(main())
