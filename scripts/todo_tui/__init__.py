"""
Todo TUI - interactive table view over the task store.

Architecture:
- state.py: modal interaction state machine (no Textual imports)
- layout.py: column widths and row projection (no Textual imports)
- theme.py: styles, built once
- views/: Textual screen and panel text
- app.py: Main application entry point
"""
