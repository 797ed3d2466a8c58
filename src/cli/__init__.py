# =============================================================================
# src/cli/__init__.py - CLI Module Overview
# =============================================================================
#
# Command-line tools for Stageside, run as `python -m src.cli.<module>`.
#
#   PLAN (plan.py)
#      Scores a festival lineup against a listener's taste (or a group's)
#      and prints a conflict-free itinerary, optionally exporting .ics.
#
# The CLI uses argparse and builds its own dependencies; it needs no
# API server and no ticketing credentials.
# =============================================================================

"""CLI tools for Stageside.

- ``python -m src.cli.plan`` — plan a festival itinerary from a JSON file.
"""
