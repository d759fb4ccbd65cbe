"""
Characters: the roster itself, its listing query (search + stable sort) and admin edits.
"""
