"""HustleQuest — XP, levels and focus sessions for daily outreach work."""

__version__ = "0.1.0"
