"""TUI applications package.

Available applications:
- kubernetes: Interactive browser for pods, PVCs and StatefulSets
"""
