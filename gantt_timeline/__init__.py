"""Interactive Gantt timeline rendering engine for PyQt6."""
