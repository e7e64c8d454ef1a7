"""
Developer tools for inspecting lap tables.
"""
