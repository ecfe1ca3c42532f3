"""Companion: sound file playback and tile layouts on a nested canvas."""
