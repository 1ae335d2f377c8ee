"""Skill maps: task tree around a Center, radial layout, gestures, portable export, store client."""
