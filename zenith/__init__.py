"""
Zenith Planner - personal planning with tasks, time blocks, habits and goals
"""

__version__ = "1.0.0"
