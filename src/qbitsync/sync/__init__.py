"""Polling layer: interval policy, the shared poll loop and the managers."""
