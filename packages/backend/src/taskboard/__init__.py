"""Taskboard — boards, lists, and cards with dual-scheme authentication.

The backend behind a Trello-style board app. Requests authenticate with
either a locally issued JWT or a federated identity token; both resolve
to one canonical user id.
"""

__version__ = "0.1.0"
