"""
PaperDesk: faculty assignment and question paper scrutiny service
"""
__version__ = "1.0.0"
