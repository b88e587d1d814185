"""
duo_core — Duolingo XP quota enforcer
=====================================
Architecture: one polling actor thread, one web server, a lock-guarded
status store between them and a bounded command queue from web to actor.

  constants.py     → Version, quota, intervals, remote URLs, messages
  config.py        → Paths, logging, config load/save, JWT persistence
  errors.py        → Error taxonomy
  models.py        → Lesson, DailyProgress, SharedStatus
  day_boundary.py  → Cutoff between today's lessons and earlier ones
  http_client.py   → requests session with pooling + connect retry
  api.py           → DuolingoClient (JWT decode, auth check, progress)
  state.py         → StatusStore (single source of truth, locked)
  commands.py      → CommandChannel + UpdateCredential/ForcePoll/Shutdown
  marker.py        → Done marker file
  actor.py         → PollingActor (the only writer of status)
  web.py           → Flask app: UI + /api/*
  runner.py        → main(): bootstrap, signals, orderly shutdown
"""
