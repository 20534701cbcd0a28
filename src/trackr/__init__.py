"""trackr: personal task tracking with a grouped, reorderable task list."""

__version__ = "0.1.0"
