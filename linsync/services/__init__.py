"""
External services used by the commands.
"""
